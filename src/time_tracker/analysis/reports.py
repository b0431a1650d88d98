"""Report rendering for time tracking data."""

from datetime import datetime
from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from time_tracker.analysis.summary import CategorySummary
from time_tracker.core.models import Task, TaskStatus, format_duration

STATUS_STYLES = {
    TaskStatus.RUNNING: ("▶", "green"),
    TaskStatus.PAUSED: ("⏸", "yellow"),
    TaskStatus.STOPPED: ("■", "dim"),
}


def format_hms(seconds: int) -> str:
    """Format seconds as ``01h 02m 03s``."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}h {minutes:02d}m {secs:02d}s"


def format_local(dt: Optional[datetime]) -> str:
    """Format an aware datetime in local time for display."""
    if dt is None:
        return "N/A"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ReportGenerator:
    """Render task listings and summaries to a rich console."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
        """
        self.console = console or Console()

    def task_list(self, tasks: list[tuple[str, Task]], now: datetime) -> None:
        """Display every task grouped by category.

        Args:
            tasks: (category, task) pairs in store order
            now: Reference instant for running tasks
        """
        if not tasks:
            self.console.print("[yellow]No tasks recorded[/yellow]")
            return

        table = Table(title=f"Tasks ({len(tasks)})")
        table.add_column("Category", style="green")
        table.add_column("Task", style="bold")
        table.add_column("First Start", style="cyan")
        table.add_column("Last End", style="cyan")
        table.add_column("Time Spent", style="magenta", justify="right")

        for category, task in tasks:
            icon, style = STATUS_STYLES[task.status]
            table.add_row(
                Text(category),
                Text(f"{icon} {task.name}", style=style),
                format_local(task.first_start),
                format_local(task.last_end),
                format_duration(task.time_spent(now)),
            )

        self.console.print(table)

    def summary_report(self, summaries: list[CategorySummary], period_label: str = "Summary") -> None:
        """Display per-category totals and status counts.

        Args:
            summaries: Category summaries to display
            period_label: Label for the report period
        """
        if not summaries:
            self.console.print("[yellow]No matching categories[/yellow]")
            return

        grand_total = sum(s.total_seconds for s in summaries)

        self.console.print(f"\n[bold cyan]Time spent - {period_label}[/bold cyan]\n")

        table = Table(title="Time by Category")
        table.add_column("Category", style="cyan")
        table.add_column("Total", style="magenta", justify="right")
        table.add_column("Running", style="green", justify="right")
        table.add_column("Paused", style="yellow", justify="right")
        table.add_column("Stopped", style="dim", justify="right")
        table.add_column("Bar", style="blue")

        for summary in summaries:
            pct = (summary.total_seconds / grand_total) * 100 if grand_total > 0 else 0
            table.add_row(
                Text(summary.category),
                format_hms(summary.total_seconds),
                str(summary.running),
                str(summary.paused),
                str(summary.stopped),
                self._create_bar(pct),
            )

        self.console.print(table)

        overview = Table(show_header=False, box=None, padding=(0, 2))
        overview.add_column(style="dim")
        overview.add_column(style="bold")
        overview.add_row("Total Time:", format_hms(grand_total))
        overview.add_row("Tasks:", str(sum(s.task_count for s in summaries)))
        self.console.print(overview)

    def _create_bar(self, percentage: float, width: int = 20) -> Text:
        """Create a visual bar for percentage display.

        Args:
            percentage: Percentage value (0-100)
            width: Width of the bar in characters

        Returns:
            Rich Text object with colored bar
        """
        filled = int((percentage / 100) * width)
        empty = width - filled

        bar = Text()
        bar.append("█" * filled, style="blue")
        bar.append("░" * empty, style="dim")

        return bar
