"""Windowed summaries over the category store."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from time_tracker.core.categorization import CategoryStore
from time_tracker.core.models import Task, TaskStatus, utcnow

NAMED_PERIODS = {
    "day": (timedelta(days=1), "Last day"),
    "week": (timedelta(weeks=1), "Last week"),
    "month": (timedelta(days=30), "Last month"),
}


@dataclass
class CategorySummary:
    """Aggregated time and status counts for one category.

    Attributes:
        category: Category name
        total_seconds: Accrued time of the included tasks
        running: Number of running tasks
        paused: Number of paused tasks
        stopped: Number of stopped tasks
        tasks: Included tasks with their accrued seconds
    """

    category: str
    total_seconds: int = 0
    running: int = 0
    paused: int = 0
    stopped: int = 0
    tasks: list[tuple[Task, int]] = field(default_factory=list)

    @property
    def task_count(self) -> int:
        """Number of tasks included in this summary."""
        return len(self.tasks)

    def add(self, task: Task, seconds: int) -> None:
        """Count a task and its accrued time."""
        self.tasks.append((task, seconds))
        self.total_seconds += seconds
        if task.status == TaskStatus.RUNNING:
            self.running += 1
        elif task.status == TaskStatus.PAUSED:
            self.paused += 1
        else:
            self.stopped += 1


def parse_period(period: str) -> tuple[timedelta, str]:
    """Turn a period argument into a lookback window.

    Accepts 'day', 'week' and 'month' (1, 7 and 30 days) or a whole number of
    days. Anything else means one day.

    Returns:
        Tuple of (window, human-readable label)
    """
    text = period.strip().lower()
    if text in NAMED_PERIODS:
        return NAMED_PERIODS[text]

    try:
        days = int(text)
        window = timedelta(days=days)
    except (ValueError, OverflowError):
        return NAMED_PERIODS["day"]

    label = "Last day" if days == 1 else f"Last {days} days"
    return window, label


def in_window(task: Task, window: Optional[timedelta], now: datetime) -> bool:
    """Check if the task's most recent chunk started within the window."""
    if window is None:
        return True
    return now - task.last_chunk.start_time <= window


def summarize(
    store: CategoryStore,
    window: Optional[timedelta] = None,
    category: Optional[str] = None,
    now: Optional[datetime] = None,
) -> list[CategorySummary]:
    """Aggregate accrued time and status counts per category.

    A task is included when its most recent chunk started no longer than
    ``window`` before ``now``. Earlier chunks don't matter, so a task last
    touched outside the window is left out entirely.

    Args:
        store: Category store to read
        window: Lookback window. None includes every task.
        category: Restrict output to this exact category name
        now: Reference instant. Defaults to the current time.

    Returns:
        One summary per category, in store order
    """
    now = now or utcnow()
    summaries = []

    for name, tasks in store.categories.items():
        if category is not None and name != category:
            continue

        summary = CategorySummary(category=name)
        for task in tasks:
            if in_window(task, window, now):
                summary.add(task, task.time_spent(now))
        summaries.append(summary)

    return summaries
