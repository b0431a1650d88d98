"""Tests for windowed summaries."""

from datetime import datetime, timedelta, timezone

import pytest

from time_tracker.analysis.summary import in_window, parse_period, summarize
from time_tracker.core.categorization import CategoryStore
from time_tracker.core.models import Task, TaskStatus, TimeChunk

NOW = datetime(2025, 11, 16, 12, 0, 0, tzinfo=timezone.utc)


def make_task(name: str, status: TaskStatus, chunks: list[tuple[timedelta, int]]) -> Task:
    """Build a task from (age of chunk start, length in seconds) pairs.

    The last chunk is left open when the task is running.
    """
    time_chunks = []
    for index, (age, seconds) in enumerate(chunks):
        start = NOW - age
        is_last = index == len(chunks) - 1
        end = None if is_last and status == TaskStatus.RUNNING else start + timedelta(seconds=seconds)
        time_chunks.append(TimeChunk(start_time=start, end_time=end))
    return Task(name=name, time_chunks=time_chunks, status=status)


@pytest.fixture
def store() -> CategoryStore:
    """Create a store with tasks of varying age and status."""
    store = CategoryStore()
    store.file_task(make_task("old #work", TaskStatus.STOPPED, [(timedelta(days=40), 600)]))
    store.file_task(make_task("recent #work", TaskStatus.STOPPED, [(timedelta(hours=1), 300)]))
    store.file_task(make_task("live #work", TaskStatus.RUNNING, [(timedelta(minutes=2), 0)]))
    store.file_task(make_task("break #home", TaskStatus.PAUSED, [(timedelta(hours=3), 60)]))
    store.file_task(
        make_task(
            "long ago resumed",
            TaskStatus.PAUSED,
            [(timedelta(days=20), 100), (timedelta(hours=2), 50)],
        )
    )
    return store


class TestParsePeriod:
    """Test period parsing."""

    @pytest.mark.parametrize(
        "text,days",
        [("day", 1), ("week", 7), ("month", 30), ("WEEK", 7), ("3", 3), ("45", 45)],
    )
    def test_known_periods(self, text: str, days: int) -> None:
        """Test named periods and day counts."""
        window, _ = parse_period(text)
        assert window == timedelta(days=days)

    @pytest.mark.parametrize("text", ["", "fortnight", "1.5", "99999999999"])
    def test_unparseable_defaults_to_one_day(self, text: str) -> None:
        """Test that anything else means one day."""
        window, label = parse_period(text)
        assert window == timedelta(days=1)
        assert label == "Last day"

    def test_labels(self) -> None:
        """Test labels for display."""
        assert parse_period("week")[1] == "Last week"
        assert parse_period("10")[1] == "Last 10 days"


class TestSummarize:
    """Test summarize."""

    def test_window_excludes_old_and_includes_recent(self, store: CategoryStore) -> None:
        """Test the one-day window filters on the latest chunk start."""
        summaries = {s.category: s for s in summarize(store, timedelta(days=1), now=NOW)}
        work_names = [task.name for task, _ in summaries["#work"].tasks]

        assert "old" not in work_names
        assert "recent" in work_names

    def test_filter_uses_latest_chunk(self, store: CategoryStore) -> None:
        """Test a task with an old first chunk but recent last chunk is included."""
        summaries = {s.category: s for s in summarize(store, timedelta(days=1), now=NOW)}
        uncategorized = summaries["Uncategorized"]

        assert uncategorized.task_count == 1
        # Both chunks count once the task is in the window
        assert uncategorized.total_seconds == 150

    def test_totals_and_counts(self, store: CategoryStore) -> None:
        """Test per-category totals and status counts."""
        summaries = {s.category: s for s in summarize(store, timedelta(days=1), now=NOW)}
        work = summaries["#work"]

        assert work.total_seconds == 300 + 120
        assert (work.running, work.paused, work.stopped) == (1, 0, 1)
        assert summaries["#home"].paused == 1
        assert summaries["#home"].total_seconds == 60

    def test_counts_sum_to_task_count(self, store: CategoryStore) -> None:
        """Test status counts add up to the filtered task count."""
        for window in (None, timedelta(days=1), timedelta(minutes=30)):
            for summary in summarize(store, window, now=NOW):
                assert summary.running + summary.paused + summary.stopped == summary.task_count

    def test_unbounded_includes_everything(self, store: CategoryStore) -> None:
        """Test no window includes all tasks."""
        summaries = summarize(store, now=NOW)

        assert sum(s.task_count for s in summaries) == 5
        work = next(s for s in summaries if s.category == "#work")
        assert work.total_seconds == 600 + 300 + 120

    def test_empty_categories_reported(self, store: CategoryStore) -> None:
        """Test categories with no tasks in the window still appear."""
        summaries = summarize(store, timedelta(minutes=30), now=NOW)

        assert [s.category for s in summaries] == ["#work", "#home", "Uncategorized"]
        assert [s.task_count for s in summaries] == [1, 0, 0]

    def test_category_filter(self, store: CategoryStore) -> None:
        """Test exact category filter."""
        summaries = summarize(store, category="#home", now=NOW)

        assert [s.category for s in summaries] == ["#home"]

    def test_category_filter_no_match(self, store: CategoryStore) -> None:
        """Test an unknown category yields an empty report."""
        assert summarize(store, category="home", now=NOW) == []

    def test_empty_store(self) -> None:
        """Test summarizing an empty store."""
        assert summarize(CategoryStore(), timedelta(days=1), now=NOW) == []


class TestInWindow:
    """Test the recency filter."""

    def test_boundary_is_inclusive(self) -> None:
        """Test a chunk starting exactly one window ago is included."""
        task = make_task("edge", TaskStatus.STOPPED, [(timedelta(days=1), 10)])
        assert in_window(task, timedelta(days=1), NOW) is True

    def test_no_window(self) -> None:
        """Test None means unbounded."""
        task = make_task("old", TaskStatus.STOPPED, [(timedelta(days=4000), 10)])
        assert in_window(task, None, NOW) is True
