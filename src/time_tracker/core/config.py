"""Configuration management for Time Tracker.

Settings live in a small YAML file grouped into sections::

    storage:
      data_file: ~/.time-tracker/tasks.json
      backup_on_clear: true
    timeline:
      chart_file: ~/.time-tracker/chart.png
      day_start_hour: 4
    logging:
      level: WARNING

Every setting is known up front. Values read from the file and values typed
on the command line go through the same conversion, so a setting is either
valid in tracker terms or rejected.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import ValidationError, validate  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".time-tracker" / "config.yml"
DATA_FILE_NAME = "tasks.json"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

TRUE_WORDS = ("true", "yes", "on", "1")
FALSE_WORDS = ("false", "no", "off", "0")


def _file_with_suffix(suffix: str, what: str) -> Callable[[Any], str]:
    def convert(raw: Any) -> str:
        text = str(raw).strip()
        if not text:
            raise ValueError(f"{what} must not be empty")
        path = Path(text).expanduser()
        if path.suffix.lower() != suffix:
            raise ValueError(f"{what} must be a {suffix} file, got {text!r}")
        if path.is_dir():
            raise ValueError(f"{what} {text!r} is a directory")
        return text

    return convert


def _to_hour(raw: Any) -> int:
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise ValueError(f"Day start hour must be a whole hour, got {raw!r}")
    try:
        hour = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Day start hour must be a whole hour, got {raw!r}")
    if not 0 <= hour <= 23:
        raise ValueError(f"Day start hour must be between 0 and 23, got {hour}")
    return hour


def _to_level(raw: Any) -> str:
    level = str(raw).strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    word = str(raw).strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    raise ValueError(f"Expected yes or no, got {raw!r}")


@dataclass(frozen=True)
class Setting:
    """A single tracker setting.

    Attributes:
        key: Dotted location in the config file, e.g. 'timeline.day_start_hour'
        default: Value used when the file doesn't set it
        description: One-line help shown by 'config show'
        convert: Turns a raw value into a valid one, raising ValueError otherwise
    """

    key: str
    default: Any
    description: str
    convert: Callable[[Any], Any]

    @property
    def section(self) -> str:
        return self.key.split(".")[0]

    @property
    def name(self) -> str:
        return self.key.split(".")[1]


SETTINGS: dict[str, Setting] = {
    s.key: s
    for s in (
        Setting(
            "storage.data_file",
            f"~/.time-tracker/{DATA_FILE_NAME}",
            "JSON file holding categories and tasks",
            _file_with_suffix(".json", "Data file"),
        ),
        Setting(
            "storage.backup_on_clear",
            True,
            "Copy the data file to backups/ before 'clear'",
            _to_bool,
        ),
        Setting(
            "timeline.chart_file",
            "~/.time-tracker/chart.png",
            "Where 'visualize' writes the timeline",
            _file_with_suffix(".png", "Chart file"),
        ),
        Setting(
            "timeline.day_start_hour",
            4,
            "Local hour at which a tracking day begins",
            _to_hour,
        ),
        Setting(
            "logging.level",
            "WARNING",
            "Log level when --verbose is not given",
            _to_level,
        ),
    )
}

# Shape of the file; value rules live in each Setting's convert
CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        section: {"type": ["object", "null"]} for section in {s.section for s in SETTINGS.values()}
    },
}


class ConfigManager:
    """Load, change and persist the tracker's settings."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. Defaults to ~/.time-tracker/config.yml

        Raises:
            ValueError: If the existing file is unusable. It is moved to
                ``config.yml.backup`` and replaced by defaults first.
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self._values: dict[str, Any] = {key: s.default for key, s in SETTINGS.items()}
        if self.config_path.exists():
            self._load()
        else:
            self.save()

    def _load(self) -> None:
        try:
            with open(self.config_path, encoding="utf-8") as f:
                document = yaml.safe_load(f)
            if document is None:
                document = {}
            validate(instance=document, schema=CONFIG_SCHEMA)
            for key, setting in SETTINGS.items():
                section = document.get(setting.section) or {}
                if setting.name in section:
                    self._values[key] = setting.convert(section[setting.name])
        except (yaml.YAMLError, ValidationError, ValueError) as e:
            reason = e.message if isinstance(e, ValidationError) else e
            backup_path = self.config_path.with_suffix(".yml.backup")
            self.config_path.replace(backup_path)
            logger.warning(f"Unusable config {self.config_path}: {reason}")
            self._values = {key: s.default for key, s in SETTINGS.items()}
            self.save()
            raise ValueError(
                f"Config file {self.config_path} is invalid ({reason}). "
                f"Moved it to {backup_path} and restored defaults."
            )

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    @property
    def data_file(self) -> Path:
        """Data file with ``~`` expanded."""
        return Path(self._values["storage.data_file"]).expanduser()

    @property
    def chart_file(self) -> Path:
        """Timeline chart path with ``~`` expanded."""
        return Path(self._values["timeline.chart_file"]).expanduser()

    @property
    def day_start_hour(self) -> int:
        return int(self._values["timeline.day_start_hour"])

    @property
    def log_level(self) -> str:
        return str(self._values["logging.level"])

    @property
    def backup_on_clear(self) -> bool:
        return bool(self._values["storage.backup_on_clear"])

    def update(self, key: str, raw: Any) -> Any:
        """Change one setting and save.

        Args:
            key: Setting key, e.g. 'timeline.day_start_hour'
            raw: New value, typically the text given on the command line

        Returns:
            The converted value that was stored

        Raises:
            KeyError: If there is no such setting
            ValueError: If the value is not valid for the setting
        """
        setting = SETTINGS[key]
        value = setting.convert(raw)
        self._values[key] = value
        self.save()
        logger.info(f"Set {key} = {value!r}")
        return value

    def restore_default(self, key: str) -> Any:
        """Put one setting back to its default and save.

        Raises:
            KeyError: If there is no such setting
        """
        default = SETTINGS[key].default
        self._values[key] = default
        self.save()
        return default

    def set_storage_location(self, directory: Path) -> Path:
        """Keep the data file as ``tasks.json`` inside ``directory``.

        Raises:
            ValueError: If ``directory`` is an existing file

        Returns:
            New data file path
        """
        directory = directory.expanduser()
        if directory.is_file():
            raise ValueError(f"Storage location {directory} is a file, not a directory")
        data_file = directory / DATA_FILE_NAME
        self.update("storage.data_file", str(data_file))
        return data_file

    def items(self) -> Iterator[tuple[Setting, Any]]:
        """Yield every setting with its current value."""
        for key, setting in SETTINGS.items():
            yield setting, self._values[key]

    def to_document(self) -> dict[str, dict[str, Any]]:
        """Current settings grouped by section, as written to the file."""
        document: dict[str, dict[str, Any]] = {}
        for setting, value in self.items():
            document.setdefault(setting.section, {})[setting.name] = value
        return document

    def save(self) -> None:
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_document(), f, default_flow_style=False, sort_keys=False)
