"""Core time tracking engine."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from time_tracker.core.categorization import CategoryStore, extract_category
from time_tracker.core.models import Task, TaskStatus, utcnow
from time_tracker.core.storage import StorageManager

logger = logging.getLogger(__name__)


class LifecycleAction(str, Enum):
    """What a lifecycle operation did to its task."""

    CREATED = "created"
    RESUMED = "resumed"
    RESTARTED = "restarted"
    ALREADY_RUNNING = "already_running"
    STOPPED = "stopped"
    PAUSED = "paused"


@dataclass
class TaskChange:
    """Result of a lifecycle operation.

    Attributes:
        task: The task acted on
        category: Category the task is filed under
        action: What happened to the task
        paused_others: Tasks paused so that only one task runs
    """

    task: Task
    category: str
    action: LifecycleAction
    paused_others: list[tuple[str, Task]] = field(default_factory=list)


@dataclass
class TrackingStatus:
    """The running task and its accrued time."""

    task: Task
    category: str
    elapsed_seconds: int


class TimeTracker:
    """Core time tracking functionality.

    Owns the category store for the duration of an invocation and saves it
    after every mutating operation.
    """

    def __init__(self, storage: Optional[StorageManager] = None):
        """Initialize time tracker.

        Args:
            storage: Storage manager instance. Creates default if None.
        """
        self.storage = storage or StorageManager()
        self.store: CategoryStore = self.storage.load()

    def start(self, description: str, now: Optional[datetime] = None) -> TaskChange:
        """Start tracking a task, creating it if needed.

        An existing task (matched by cleaned name within its category) is
        resumed in place. Any other running task is paused first.

        Args:
            description: Task description, optionally carrying a ``#category``
            now: Reference instant. Defaults to the current time.

        Returns:
            Change describing the started task
        """
        now = now or utcnow()
        category, name = extract_category(description)
        task = self.store.find_task(category, name)

        if task is not None and task.is_running:
            logger.info(f"Task already running: {name}")
            change = TaskChange(task, category, LifecycleAction.ALREADY_RUNNING)
        else:
            paused_others = self._pause_running(now, keep=task)
            if task is None:
                task = Task.new(description, now)
                self.store.file_task(task)
                action = LifecycleAction.CREATED
                logger.info(f"Created task {task.name!r} in {category}")
            else:
                action = (
                    LifecycleAction.RESUMED
                    if task.status == TaskStatus.PAUSED
                    else LifecycleAction.RESTARTED
                )
                task.resume(now)
                logger.info(f"Task {task.name!r} {action.value}")
            change = TaskChange(task, category, action, paused_others)

        self.save()
        return change

    def stop(self, now: Optional[datetime] = None) -> Optional[TaskChange]:
        """Stop the running task.

        Returns:
            Change for the stopped task, or None if nothing was running
        """
        found = self.store.find_by_status(TaskStatus.RUNNING)
        change = None
        if found is None:
            logger.info("Nothing to stop")
        else:
            category, task = found
            task.stop(now or utcnow())
            logger.info(f"Stopped task {task.name!r}")
            change = TaskChange(task, category, LifecycleAction.STOPPED)

        self.save()
        return change

    def pause(self, now: Optional[datetime] = None) -> Optional[TaskChange]:
        """Pause the running task.

        Returns:
            Change for the paused task, or None if nothing was running
        """
        found = self.store.find_by_status(TaskStatus.RUNNING)
        if found is None:
            logger.info("Nothing to pause")
            return None

        category, task = found
        task.pause(now or utcnow())
        logger.info(f"Paused task {task.name!r}")
        self.save()
        return TaskChange(task, category, LifecycleAction.PAUSED)

    def resume(self, now: Optional[datetime] = None) -> Optional[TaskChange]:
        """Resume the first paused task.

        Returns:
            Change for the resumed task, or None if nothing was paused
        """
        found = self.store.find_by_status(TaskStatus.PAUSED)
        if found is None:
            logger.info("Nothing to resume")
            return None

        category, task = found
        now = now or utcnow()
        paused_others = self._pause_running(now, keep=task)
        task.resume(now)
        logger.info(f"Resumed task {task.name!r}")
        self.save()
        return TaskChange(task, category, LifecycleAction.RESUMED, paused_others)

    def status(self, now: Optional[datetime] = None) -> Optional[TrackingStatus]:
        """Get current tracking status.

        Returns:
            Running task with its accrued time, or None if idle
        """
        found = self.store.find_by_status(TaskStatus.RUNNING)
        if found is None:
            return None
        category, task = found
        return TrackingStatus(task, category, task.time_spent(now))

    def list_tasks(self) -> list[tuple[str, Task]]:
        """All (category, task) pairs in store order."""
        return list(self.store.iter_tasks())

    def clear(self, backup: bool = True) -> Optional[Path]:
        """Remove all categories and tasks.

        Args:
            backup: Copy the current data file aside first

        Returns:
            Path to the backup, if one was made
        """
        backup_path = self.storage.backup() if backup else None
        self.store.clear()
        self.save()
        logger.info("Cleared all data")
        return backup_path

    def export(self, path: Path) -> Path:
        """Write the store to ``path`` as JSON."""
        return self.storage.export(self.store, path)

    def save(self) -> None:
        """Persist the store.

        Raises:
            OSError: If the store cannot be written
        """
        self.storage.save(self.store)

    def _pause_running(self, now: datetime, keep: Optional[Task] = None) -> list[tuple[str, Task]]:
        """Pause every running task except ``keep``."""
        paused = []
        for category, task in self.store.tasks_with_status(TaskStatus.RUNNING):
            if task is keep:
                continue
            task.pause(now)
            logger.info(f"Paused task {task.name!r} to start another")
            paused.append((category, task))
        return paused
