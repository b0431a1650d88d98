"""Tests for storage manager."""

import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from time_tracker.core.categorization import CategoryStore
from time_tracker.core.models import Task
from time_tracker.core.storage import LoadStatus, StorageManager

NOW = datetime(2025, 11, 16, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture  # type: ignore[misc]
def temp_storage() -> StorageManager:
    """Create a storage manager with temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield StorageManager(Path(tmpdir) / "data" / "tasks.json")


def sample_store() -> CategoryStore:
    store = CategoryStore()
    running = Task.new("write report #work on Q3", NOW)
    paused = Task.new("fix sink #home", NOW - timedelta(hours=2))
    paused.pause(NOW - timedelta(hours=1))
    stopped = Task.new("inbox", NOW - timedelta(days=3))
    stopped.stop(NOW - timedelta(days=3) + timedelta(minutes=20))
    for task in (running, paused, stopped):
        store.file_task(task)
    return store


class TestStorageManager:
    """Test StorageManager."""

    def test_load_missing_file(self, temp_storage: StorageManager) -> None:
        """Test a missing file yields an empty store."""
        store = temp_storage.load()

        assert store.categories == {}
        assert temp_storage.load_status == LoadStatus.MISSING

    def test_save_creates_parent_directories(self, temp_storage: StorageManager) -> None:
        """Test that saving creates the data directory."""
        temp_storage.save(CategoryStore())

        assert temp_storage.data_file.exists()

    def test_round_trip(self, temp_storage: StorageManager) -> None:
        """Test saving and reloading reproduces the store."""
        store = sample_store()
        temp_storage.save(store)

        loaded = temp_storage.load()

        assert temp_storage.load_status == LoadStatus.LOADED
        assert list(loaded.categories) == list(store.categories)
        for category, tasks in store.categories.items():
            loaded_tasks = loaded.categories[category]
            assert [t.name for t in loaded_tasks] == [t.name for t in tasks]
            assert [t.status for t in loaded_tasks] == [t.status for t in tasks]
            assert [t.time_chunks for t in loaded_tasks] == [t.time_chunks for t in tasks]

    def test_file_format(self, temp_storage: StorageManager) -> None:
        """Test the on-disk JSON layout."""
        temp_storage.save(sample_store())

        with open(temp_storage.data_file) as f:
            data = json.load(f)

        categories = data["categorization"]["categories"]
        assert list(categories) == ["#work", "#home", "Uncategorized"]
        task = categories["#work"][0]
        assert task["name"] == "write report on Q3"
        assert task["status"] == "Running"
        assert task["paused_duration"] == 0
        assert task["time_chunks"] == [{"start_time": "2025-11-16T12:00:00+00:00", "end_time": None}]

    def test_load_external_rfc3339(self, temp_storage: StorageManager) -> None:
        """Test loading timestamps with 'Z' and nanoseconds."""
        temp_storage.data_file.parent.mkdir(parents=True)
        document = {
            "categorization": {
                "categories": {
                    "#work": [
                        {
                            "name": "review",
                            "time_chunks": [
                                {
                                    "start_time": "2025-11-16T10:00:00.123456789Z",
                                    "end_time": "2025-11-16T10:30:00.123456789Z",
                                }
                            ],
                            "paused_duration": 0,
                            "status": "Stopped",
                        }
                    ]
                }
            }
        }
        temp_storage.data_file.write_text(json.dumps(document))

        store = temp_storage.load()

        task = store.categories["#work"][0]
        assert task.time_spent(NOW) == 1800

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            "[]",
            '{"categorization": {}}',
            '{"categorization": {"categories": {"x": [{"name": "a"}]}}}',
            '{"categorization": {"categories": {"x": [{"name": "a", "time_chunks": [], "status": "Running"}]}}}',
            '{"categorization": {"categories": {"x": [{"name": "a", "time_chunks": [[1]], "status": "Running"}]}}}',
        ],
    )
    def test_corrupt_file(self, temp_storage: StorageManager, content: str) -> None:
        """Test malformed content yields an empty store and is kept aside."""
        temp_storage.data_file.parent.mkdir(parents=True)
        temp_storage.data_file.write_text(content)

        store = temp_storage.load()

        assert store.categories == {}
        assert temp_storage.load_status == LoadStatus.CORRUPT
        corrupt = temp_storage.data_file.with_name("tasks.json.corrupt")
        assert corrupt.read_text() == content

    def test_backup(self, temp_storage: StorageManager) -> None:
        """Test backing up the data file."""
        assert temp_storage.backup() is None

        temp_storage.save(sample_store())
        backup_path = temp_storage.backup("before-clear")

        assert backup_path is not None
        assert backup_path.parent == temp_storage.backup_dir
        assert backup_path.read_text() == temp_storage.data_file.read_text()

    def test_export_is_indented(self, temp_storage: StorageManager) -> None:
        """Test export writes readable JSON."""
        target = temp_storage.data_file.parent / "export.json"

        temp_storage.export(sample_store(), target)

        text = target.read_text()
        assert "\n  " in text
        assert json.loads(text)["categorization"]["categories"]["#home"][0]["status"] == "Paused"

    def test_save_failure_propagates(self, temp_storage: StorageManager) -> None:
        """Test that save errors are raised and leave no temp file."""
        temp_storage.data_file.mkdir(parents=True)

        with pytest.raises(OSError):
            temp_storage.save(sample_store())

        assert not temp_storage.data_file.with_suffix(".tmp").exists()
