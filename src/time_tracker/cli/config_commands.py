"""CLI commands for tracker settings."""

import json
import sys
from pathlib import Path
from typing import NoReturn

import click  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]
from rich.markup import escape  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from time_tracker.core.config import SETTINGS, ConfigManager

console = Console()
error_console = Console(stderr=True)


def _exit_with_error(message: str) -> NoReturn:
    error_console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def load_config(ctx: click.Context) -> ConfigManager:
    """Load settings from the file given with --config-file, if any.

    Exits with status 1 if the file had to be replaced by defaults.
    """
    obj = ctx.find_root().obj or {}
    config_file = obj.get("config_file")
    try:
        return ConfigManager(Path(config_file) if config_file else None)
    except ValueError as e:
        _exit_with_error(str(e))


class SettingKey(click.ParamType):
    """Setting name, completed and checked against the known settings."""

    name = "setting"

    def convert(self, value, param, ctx):  # type: ignore[no-untyped-def]
        if value not in SETTINGS:
            self.fail(
                f"unknown setting {value!r}. Known settings: {', '.join(SETTINGS)}",
                param,
                ctx,
            )
        return value


@click.group()  # type: ignore[misc]
def config() -> None:
    """Show or change tracker settings.

    Settings are stored in ~/.time-tracker/config.yml unless --config-file
    is given.
    """


@config.command("show")  # type: ignore[misc]
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show every setting with its current value.

    Example:
        time-tracker config show
    """
    config_mgr = load_config(ctx)

    if as_json:
        click.echo(json.dumps(config_mgr.to_document(), indent=2))
        return

    table = Table(title="Time Tracker Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Description", style="dim")

    for setting, value in config_mgr.items():
        shown = str(value) if value == setting.default else f"{value} [yellow](changed)[/yellow]"
        table.add_row(setting.key, shown, setting.description)

    console.print(table)
    console.print(f"\nConfig file: {config_mgr.config_path}")


@config.command("set")  # type: ignore[misc]
@click.argument("key", type=SettingKey())  # type: ignore[misc]
@click.argument("value")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Change a setting.

    Example:
        time-tracker config set timeline.day_start_hour 6
        time-tracker config set storage.backup_on_clear no
    """
    config_mgr = load_config(ctx)

    try:
        stored = config_mgr.update(key, value)
    except ValueError as e:
        _exit_with_error(str(e))

    console.print(f"[green]✓[/green] {key} = {escape(str(stored))}")


@config.command("unset")  # type: ignore[misc]
@click.argument("key", type=SettingKey())  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_unset(ctx: click.Context, key: str) -> None:
    """Put a setting back to its default.

    Example:
        time-tracker config unset timeline.chart_file
    """
    default = load_config(ctx).restore_default(key)
    console.print(f"[green]✓[/green] {key} = {escape(str(default))} (default)")
