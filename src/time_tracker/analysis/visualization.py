"""Timeline chart rendering."""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from time_tracker.core.categorization import CategoryStore
from time_tracker.core.models import utcnow

logger = logging.getLogger(__name__)


def day_bounds(now: datetime, day_start_hour: int = 4) -> tuple[datetime, datetime]:
    """Local-time bounds of the tracking day containing ``now``.

    A tracking day runs from ``day_start_hour`` to the same hour the next
    day, so work after midnight still counts toward the previous day.
    """
    local_now = now.astimezone()
    start = local_now.replace(hour=day_start_hour, minute=0, second=0, microsecond=0)
    if local_now.hour < day_start_hour:
        start -= timedelta(days=1)
    return start, start + timedelta(days=1)


def render_timeline(
    store: CategoryStore,
    output_path: Path,
    now: Optional[datetime] = None,
    day_start_hour: int = 4,
) -> Path:
    """Render the current tracking day as a PNG timeline.

    Each task gets one row; each chunk is drawn as a bar, with open chunks
    extending to ``now``.

    Args:
        store: Category store to draw
        output_path: Where to write the PNG
        now: Reference instant. Defaults to the current time.
        day_start_hour: Local hour at which a tracking day begins

    Returns:
        Path the chart was written to
    """
    # Lazy import matplotlib
    import matplotlib

    matplotlib.use("Agg")  # Non-interactive backend
    import matplotlib.dates as mdates
    import matplotlib.pyplot as plt

    now = now or utcnow()
    day_start, day_end = day_bounds(now, day_start_hour)
    tasks = list(store.iter_tasks())
    logger.debug(f"Rendering {len(tasks)} tasks between {day_start} and {day_end}")

    fig, ax = plt.subplots(figsize=(12.8, 7.2))
    colors = plt.get_cmap("tab20")

    for row, (category, task) in enumerate(tasks):
        spans = []
        for chunk in task.time_chunks:
            start = max(chunk.start_time.astimezone(), day_start)
            end = min((chunk.end_time or now).astimezone(), day_end)
            if end <= start:
                continue
            spans.append((mdates.date2num(start), mdates.date2num(end) - mdates.date2num(start)))
        if spans:
            ax.broken_barh(spans, (row + 0.1, 0.8), facecolors=colors(row % 20))

    ax.set_xlim(mdates.date2num(day_start), mdates.date2num(day_end))
    ax.set_ylim(0, max(len(tasks), 1))
    ax.set_yticks([row + 0.5 for row in range(len(tasks))])
    ax.set_yticklabels([f"{task.name} ({category})" for category, task in tasks])
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M", tz=day_start.tzinfo))
    ax.set_xlabel("Time")
    ax.set_ylabel("Tasks")
    ax.set_title("Time Tracker Visualization")
    ax.grid(axis="x", linestyle=":", alpha=0.4)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    fig.savefig(output_path, dpi=100)
    plt.close(fig)

    logger.info(f"Timeline written to {output_path}")
    return output_path
