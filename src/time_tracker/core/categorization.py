"""Category extraction and the category store."""

from typing import Any, Iterator, Optional

from time_tracker.core.models import Task, TaskStatus

UNCATEGORIZED = "Uncategorized"
TAG_PREFIX = "#"


def extract_category(description: str) -> tuple[str, str]:
    """Split a task description into its category tag and cleaned name.

    The first word starting at the first ``#`` is the category (prefix
    included). The cleaned name is the text before the tag followed by the
    words after it. A description without a usable tag falls back to
    ``Uncategorized`` and is returned unchanged.

    A ``#`` with no name attached, whether trailing (``"fix sink #"``) or
    followed by a space (``"fix # sink"``), is not a tag. Such input is
    never filed under a category called ``"#"``.

    Args:
        description: Free-text task description

    Returns:
        Tuple of (category name, cleaned task name)

    Example:
        >>> extract_category("write report #work on Q3")
        ('#work', 'write report on Q3')
    """
    index = description.find(TAG_PREFIX)
    if index == -1:
        return UNCATEGORIZED, description

    before = description[:index].rstrip()
    words = description[index:].split()
    if not words or words[0] == TAG_PREFIX:
        return UNCATEGORIZED, description

    category = words[0]
    cleaned = " ".join(part for part in (before, " ".join(words[1:])) if part)
    return category, cleaned


class CategoryStore:
    """Mapping from category name to its tasks, in insertion order."""

    def __init__(self, categories: Optional[dict[str, list[Task]]] = None):
        """Initialize category store.

        Args:
            categories: Existing category mapping. Starts empty if None.
        """
        self.categories: dict[str, list[Task]] = categories if categories is not None else {}

    @property
    def is_empty(self) -> bool:
        """Check if the store holds no tasks."""
        return not any(self.categories.values())

    def add_category(self, name: str) -> None:
        """Create an empty category if it doesn't exist yet."""
        if name not in self.categories:
            self.categories[name] = []

    def file_task(self, task: Task) -> str:
        """File a task under the category tagged in its name.

        The task's name is rewritten to the cleaned form.

        Args:
            task: Task whose name may still carry a ``#tag``

        Returns:
            Name of the category the task was filed under
        """
        category, cleaned = extract_category(task.name)
        task.name = cleaned
        self.add_category(category)
        self.categories[category].append(task)
        return category

    def find_task(self, category: str, name: str) -> Optional[Task]:
        """Find a task by cleaned name within a category."""
        for task in self.categories.get(category, []):
            if task.name == name:
                return task
        return None

    def iter_tasks(self) -> Iterator[tuple[str, Task]]:
        """Yield (category, task) pairs across all categories."""
        for category, tasks in self.categories.items():
            for task in tasks:
                yield category, task

    def find_by_status(self, status: TaskStatus) -> Optional[tuple[str, Task]]:
        """Find the first task with the given status across all categories.

        Returns:
            Tuple of (category, task) or None if no task matches
        """
        for category, task in self.iter_tasks():
            if task.status == status:
                return category, task
        return None

    def tasks_with_status(self, status: TaskStatus) -> list[tuple[str, Task]]:
        """All (category, task) pairs with the given status."""
        return [(category, task) for category, task in self.iter_tasks() if task.status == status]

    def clear(self) -> None:
        """Remove every category and task."""
        self.categories = {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "categories": {
                category: [task.to_dict() for task in tasks]
                for category, tasks in self.categories.items()
            }
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CategoryStore":
        """Create CategoryStore from dictionary (JSON deserialization)."""
        categories = data["categories"]
        if not isinstance(categories, dict):
            raise ValueError("'categories' must be an object")
        return cls(
            {
                str(category): [Task.from_dict(task) for task in tasks]
                for category, tasks in categories.items()
            }
        )
