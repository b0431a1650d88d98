"""Core functionality for time tracking."""

from time_tracker.core.categorization import CategoryStore, extract_category
from time_tracker.core.models import Task, TaskStatus, TimeChunk
from time_tracker.core.tracker import TimeTracker

__all__ = ["CategoryStore", "Task", "TaskStatus", "TimeChunk", "TimeTracker", "extract_category"]
