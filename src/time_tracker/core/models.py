"""Core data models for time tracking."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC3339 timestamp into an aware UTC datetime.

    Accepts a trailing ``Z`` and fractional seconds longer than microseconds
    (extra digits are truncated). Naive values are assumed to be UTC.

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        for ch in rest:
            if not ch.isdigit():
                break
            digits += ch
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest[len(digits):]}"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format datetime as an RFC3339 string in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def format_duration(seconds: int) -> str:
    """Format seconds as ``HH:MM:SS``."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class TaskStatus(str, Enum):
    """Lifecycle state of a task."""

    RUNNING = "Running"
    PAUSED = "Paused"
    STOPPED = "Stopped"


@dataclass
class TimeChunk:
    """One contiguous interval of active work.

    Attributes:
        start_time: When the interval began
        end_time: When the interval ended (None while work is ongoing)
    """

    start_time: datetime
    end_time: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        """Check if this chunk is still accruing time."""
        return self.end_time is None

    def elapsed(self, now: datetime) -> float:
        """Seconds covered by this chunk, using ``now`` as the end of an open chunk."""
        end = self.end_time if self.end_time is not None else now
        return (end - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "start_time": format_timestamp(self.start_time),
            "end_time": format_timestamp(self.end_time) if self.end_time else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeChunk":
        """Create TimeChunk from dictionary (JSON deserialization)."""
        end_time = data.get("end_time")
        return cls(
            start_time=parse_timestamp(data["start_time"]),
            end_time=parse_timestamp(end_time) if end_time else None,
        )


@dataclass
class Task:
    """A named unit of work and the intervals spent on it.

    ``time_chunks`` is never empty, and only the last chunk may be open. A
    task is running exactly when its last chunk is open.

    Attributes:
        name: Task description without its category tag
        time_chunks: Recorded intervals, oldest first
        status: Current lifecycle state
    """

    name: str
    time_chunks: list[TimeChunk] = field(default_factory=list)
    status: TaskStatus = TaskStatus.RUNNING

    @classmethod
    def new(cls, name: str, now: Optional[datetime] = None) -> "Task":
        """Create a running task with a single open chunk starting at ``now``."""
        return cls(
            name=name,
            time_chunks=[TimeChunk(start_time=now or utcnow())],
            status=TaskStatus.RUNNING,
        )

    @property
    def last_chunk(self) -> TimeChunk:
        """Most recent chunk."""
        return self.time_chunks[-1]

    @property
    def first_start(self) -> datetime:
        """Start of the first recorded chunk."""
        return self.time_chunks[0].start_time

    @property
    def last_end(self) -> Optional[datetime]:
        """End of the last chunk, None if the task is running."""
        return self.last_chunk.end_time

    @property
    def is_running(self) -> bool:
        """Check if this task is currently running."""
        return self.status == TaskStatus.RUNNING

    def stop(self, now: Optional[datetime] = None) -> None:
        """Close the open chunk (if any) and mark the task stopped."""
        self._close(now or utcnow())
        self.status = TaskStatus.STOPPED

    def pause(self, now: Optional[datetime] = None) -> bool:
        """Close the open chunk and mark the task paused.

        Returns:
            True if the task was running and is now paused
        """
        if self.status != TaskStatus.RUNNING:
            return False
        self._close(now or utcnow())
        self.status = TaskStatus.PAUSED
        return True

    def resume(self, now: Optional[datetime] = None) -> bool:
        """Open a new chunk on a paused or stopped task.

        Returns:
            True if a new chunk was opened
        """
        if self.status == TaskStatus.RUNNING:
            return False
        self.time_chunks.append(TimeChunk(start_time=now or utcnow()))
        self.status = TaskStatus.RUNNING
        return True

    def _close(self, now: datetime) -> None:
        last = self.last_chunk
        if last.is_open:
            # Clock skew must not produce a negative interval
            last.end_time = max(now, last.start_time)

    def time_spent(self, now: Optional[datetime] = None) -> int:
        """Total active seconds as of ``now``.

        Closed chunks contribute their full length. The trailing open chunk
        counts up to ``now`` only while the task is running; an open chunk on
        a task that is not running contributes nothing.

        Args:
            now: Reference instant. Defaults to the current time.

        Returns:
            Whole seconds of accrued work, never negative
        """
        now = now or utcnow()
        last_index = len(self.time_chunks) - 1
        total = 0.0
        for index, chunk in enumerate(self.time_chunks):
            if not chunk.is_open:
                total += chunk.elapsed(now)
            elif index == last_index and self.status == TaskStatus.RUNNING:
                total += chunk.elapsed(now)
        return max(0, int(total))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "time_chunks": [chunk.to_dict() for chunk in self.time_chunks],
            # Kept for file compatibility; never read back
            "paused_duration": 0,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Create Task from dictionary (JSON deserialization).

        Raises:
            ValueError: If the task has no chunks or an unknown status
        """
        chunks = [TimeChunk.from_dict(chunk) for chunk in data["time_chunks"]]
        if not chunks:
            raise ValueError(f"Task has no time chunks: {data.get('name')!r}")
        return cls(
            name=str(data["name"]),
            time_chunks=chunks,
            status=TaskStatus(data["status"]),
        )
