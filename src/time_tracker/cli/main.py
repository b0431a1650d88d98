"""Main CLI application."""

import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from time_tracker import __version__
from time_tracker.analysis.reports import ReportGenerator, format_local
from time_tracker.analysis.summary import parse_period, summarize
from time_tracker.cli.config_commands import config, load_config
from time_tracker.core.logging_setup import setup_logging
from time_tracker.core.models import format_duration, utcnow
from time_tracker.core.storage import LoadStatus, StorageManager
from time_tracker.core.tracker import LifecycleAction, TaskChange, TimeTracker

console = Console()
error_console = Console(stderr=True)


def get_tracker(ctx: click.Context) -> TimeTracker:
    """Get TimeTracker for the configured (or overridden) data file."""
    config_mgr = load_config(ctx)
    if not ctx.obj.get("verbose"):
        setup_logging(config_mgr.log_level)

    data_file = ctx.obj.get("data_file")
    path = Path(data_file) if data_file else config_mgr.data_file
    tracker = TimeTracker(StorageManager(path))

    if tracker.storage.load_status == LoadStatus.CORRUPT:
        error_console.print(
            f"[yellow]Warning:[/yellow] State file {path} is unreadable, starting fresh "
            f"(original kept as {path.name}.corrupt)"
        )
    return tracker


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def print_paused_others(change: TaskChange) -> None:
    for category, task in change.paused_others:
        console.print(f"[yellow]⏸[/yellow]  Paused: {escape(task.name)} ({escape(category)})")


@click.group()
@click.version_option(version=__version__)
@click.option("--data-file", help="Custom data file", type=click.Path(dir_okay=False))
@click.option("--config-file", help="Custom configuration file", type=click.Path(dir_okay=False))
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    data_file: Optional[str],
    config_file: Optional[str],
    no_color: bool,
    verbose: bool,
) -> None:
    """Time Tracker - track time spent on tasks from the command line.

    Tag a task with #category anywhere in its description to file it
    under that category.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_file"] = data_file
    ctx.obj["config_file"] = config_file
    ctx.obj["verbose"] = verbose

    setup_logging("DEBUG" if verbose else "WARNING")

    if no_color:
        console.no_color = True
        error_console.no_color = True


cli.add_command(config)


@cli.command()
@click.argument("task", nargs=-1, required=True)
@click.pass_context
def start(ctx: click.Context, task: tuple[str, ...]) -> None:
    """Start (or resume) a task.

    Any other running task is paused.

    Example:
        time-tracker start write report #work on Q3
    """
    tracker = get_tracker(ctx)
    description = " ".join(task)

    try:
        change = tracker.start(description)
    except OSError as e:
        fail(f"Could not save data: {e}")

    print_paused_others(change)
    name = change.task.name
    if change.action == LifecycleAction.ALREADY_RUNNING:
        console.print(f"[yellow]Task already running, no changes made:[/yellow] {escape(name)}")
    elif change.action == LifecycleAction.CREATED:
        console.print(f"[green]✓[/green] Started tracking: {escape(name)}")
        console.print(f"  Category: {escape(change.category)}")
        console.print(f"  Started: {format_local(change.task.last_chunk.start_time)}")
    else:
        console.print(f"[green]▶[/green]  Resumed: {escape(name)}")
        console.print(f"  Category: {escape(change.category)}")


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop the running task.

    Example:
        time-tracker stop
    """
    tracker = get_tracker(ctx)

    try:
        change = tracker.stop()
    except OSError as e:
        fail(f"Could not save data: {e}")

    if change is None:
        console.print("[yellow]No task is currently running[/yellow]")
        return

    console.print(f"[green]✓[/green] Stopped tracking: {escape(change.task.name)}")
    console.print(f"  Time spent: {format_duration(change.task.time_spent())}")


@cli.command()
@click.pass_context
def pause(ctx: click.Context) -> None:
    """Pause the running task.

    Example:
        time-tracker pause
    """
    tracker = get_tracker(ctx)

    try:
        change = tracker.pause()
    except OSError as e:
        fail(f"Could not save data: {e}")

    if change is None:
        console.print("[yellow]No task is currently running[/yellow]")
        return

    console.print(f"[yellow]⏸[/yellow]  Paused: {escape(change.task.name)}")


@cli.command()
@click.pass_context
def resume(ctx: click.Context) -> None:
    """Resume the paused task.

    Example:
        time-tracker resume
    """
    tracker = get_tracker(ctx)

    try:
        change = tracker.resume()
    except OSError as e:
        fail(f"Could not save data: {e}")

    if change is None:
        console.print("[yellow]No paused task found[/yellow]")
        return

    print_paused_others(change)
    console.print(f"[green]▶[/green]  Resumed: {escape(change.task.name)}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the running task and its time so far.

    Example:
        time-tracker status
    """
    tracker = get_tracker(ctx)
    current = tracker.status()

    if current is None:
        console.print("[yellow]Idle - no task currently running[/yellow]")
        console.print("\nStart tracking with: [cyan]time-tracker start \"Task name\"[/cyan]")
        return

    content = f"""[bold]{escape(current.task.name)}[/bold]

[dim]Category:[/dim] {escape(current.category)}
[dim]Since:[/dim] {format_local(current.task.last_chunk.start_time)}
[dim]Time spent:[/dim] {format_duration(current.elapsed_seconds)}"""

    console.print(Panel(content, title="Currently Tracking", border_style="green"))


@cli.command("list")
@click.pass_context
def list_tasks(ctx: click.Context) -> None:
    """List all tasks by category.

    Example:
        time-tracker list
    """
    tracker = get_tracker(ctx)
    ReportGenerator(console).task_list(tracker.list_tasks(), utcnow())


@cli.command()
@click.argument("period", required=False)
@click.option("-c", "--category", help="Only summarize this category (e.g. '#work')")
@click.pass_context
def summary(ctx: click.Context, period: Optional[str], category: Optional[str]) -> None:
    """Summarize time per category.

    PERIOD is day, week, month or a number of days. Without it, all
    recorded time is summarized. Tasks are included when their latest
    session started within the period.

    Example:
        time-tracker summary week
        time-tracker summary 3 -c "#work"
    """
    tracker = get_tracker(ctx)

    window, label = parse_period(period) if period else (None, "All time")

    summaries = summarize(tracker.store, window=window, category=category)
    ReportGenerator(console).summary_report(summaries, label)


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Delete all recorded tasks.

    Example:
        time-tracker clear --yes
    """
    tracker = get_tracker(ctx)

    if not yes:
        console.print("[yellow]Warning:[/yellow] This will delete all recorded tasks.")
        if not click.confirm("Continue?"):
            console.print("Cancelled")
            return

    try:
        backup_path = tracker.clear(backup=load_config(ctx).backup_on_clear)
    except OSError as e:
        fail(f"Could not clear data: {e}")

    if backup_path:
        console.print(f"Backed up previous data to {backup_path}")
    console.print("[green]✓[/green] Cleared all data")


@cli.command()
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.pass_context
def export(ctx: click.Context, file_path: str) -> None:
    """Export all data to a JSON file.

    Example:
        time-tracker export ~/tasks-backup.json
    """
    tracker = get_tracker(ctx)

    try:
        path = tracker.export(Path(file_path).expanduser())
    except OSError as e:
        fail(f"Could not export data: {e}")

    console.print(f"[green]✓[/green] Exported data to {path}")


@cli.command()
@click.option("-o", "--output", help="Output PNG path", type=click.Path(dir_okay=False))
@click.pass_context
def visualize(ctx: click.Context, output: Optional[str]) -> None:
    """Render today's timeline as a PNG chart.

    Example:
        time-tracker visualize -o chart.png
    """
    from time_tracker.analysis.visualization import render_timeline

    tracker = get_tracker(ctx)
    config_mgr = load_config(ctx)
    output_path = Path(output).expanduser() if output else config_mgr.chart_file

    try:
        path = render_timeline(
            tracker.store,
            output_path,
            day_start_hour=config_mgr.day_start_hour,
        )
    except OSError as e:
        fail(f"Could not write chart: {e}")

    console.print(f"[green]✓[/green] Timeline written to {path}")


@cli.command()
@click.option(
    "--storage-location",
    required=True,
    type=click.Path(file_okay=False),
    help="Directory to keep tasks.json in",
)
@click.pass_context
def configure(ctx: click.Context, storage_location: str) -> None:
    """Set where task data is stored.

    Example:
        time-tracker configure --storage-location ~/Dropbox/time-tracker
    """
    config_mgr = load_config(ctx)
    try:
        data_file = config_mgr.set_storage_location(Path(storage_location))
    except ValueError as e:
        fail(str(e))
    console.print(f"[green]✓[/green] Data file set to {data_file}")


if __name__ == "__main__":
    cli(obj={})
