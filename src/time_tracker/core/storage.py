"""JSON storage for the category store with atomic writes."""

import json
import logging
import os
import shutil
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from time_tracker.core.categorization import CategoryStore

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path.home() / ".time-tracker" / "tasks.json"


class LoadStatus(str, Enum):
    """Outcome of the last load."""

    LOADED = "loaded"
    MISSING = "missing"
    CORRUPT = "corrupt"


class StorageManager:
    """Persists the category store as a single JSON document."""

    def __init__(self, data_file: Optional[Path] = None):
        """Initialize storage manager.

        Args:
            data_file: Custom data file. Defaults to ~/.time-tracker/tasks.json
        """
        if data_file is None:
            data_file = DEFAULT_DATA_FILE

        self.data_file = data_file
        self.backup_dir = self.data_file.parent / "backups"
        self.load_status: Optional[LoadStatus] = None

    def load(self) -> CategoryStore:
        """Load the category store from disk.

        A missing file yields an empty store. An unreadable or malformed file
        also yields an empty store, but sets ``load_status`` to
        ``LoadStatus.CORRUPT`` and copies the file aside so the next save
        doesn't destroy it.

        Returns:
            Loaded category store
        """
        if not self.data_file.exists():
            self.load_status = LoadStatus.MISSING
            logger.debug(f"No data file at {self.data_file}, starting empty")
            return CategoryStore()

        try:
            with open(self.data_file, encoding="utf-8") as f:
                data = json.load(f)
            store = CategoryStore.from_dict(data["categorization"])
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"State file {self.data_file} is unreadable, starting fresh: {e}")
            self.load_status = LoadStatus.CORRUPT
            self._preserve_corrupt()
            return CategoryStore()

        self.load_status = LoadStatus.LOADED
        logger.debug(f"Loaded {sum(1 for _ in store.iter_tasks())} tasks from {self.data_file}")
        return store

    def save(self, store: CategoryStore) -> None:
        """Save the category store atomically.

        Raises:
            OSError: If the file cannot be written
        """
        self._write_json_atomic(self.data_file, self._document(store))
        logger.debug(f"Saved store to {self.data_file}")

    def export(self, store: CategoryStore, path: Path) -> Path:
        """Write the category store to an arbitrary file, indented.

        Returns:
            Path written to
        """
        self._write_json_atomic(path, self._document(store), indent=2)
        logger.info(f"Exported store to {path}")
        return path

    def backup(self, label: Optional[str] = None) -> Optional[Path]:
        """Copy the data file into the backup directory.

        Args:
            label: Optional label for backup. Defaults to timestamp

        Returns:
            Path to the backup file, or None if there is nothing to back up
        """
        if not self.data_file.exists():
            return None

        if label is None:
            label = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = self.backup_dir / f"{self.data_file.stem}_{label}{self.data_file.suffix}"
        shutil.copy2(self.data_file, backup_path)
        logger.info(f"Backed up {self.data_file} to {backup_path}")
        return backup_path

    def _document(self, store: CategoryStore) -> dict[str, Any]:
        return {"categorization": store.to_dict()}

    def _preserve_corrupt(self) -> None:
        corrupt_path = self.data_file.with_name(self.data_file.name + ".corrupt")
        try:
            shutil.copy2(self.data_file, corrupt_path)
        except OSError as e:
            logger.error(f"Failed to preserve unreadable state file: {e}")

    def _write_json_atomic(self, file_path: Path, data: dict[str, Any], indent: Optional[int] = None) -> None:
        """Write JSON file atomically using temporary file and rename.

        Args:
            file_path: Target file path
            data: JSON-serializable document
            indent: Optional indentation level
        """
        file_path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = file_path.with_suffix(".tmp")

        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=indent)

                # Flush to disk
                f.flush()
                os.fsync(f.fileno())

            # Atomic rename
            temp_file.replace(file_path)

        except Exception:
            # Clean up temp file on error
            if temp_file.exists():
                temp_file.unlink()
            raise
