"""Unit tests for TaskStore."""

import os
import pytest

from flattask import store as store_module
from flattask.codec import encode_task
from flattask.models import TaskRecord
from flattask.recovery import (
    FileOperationError,
    InvalidTaskNameError,
    TaskExistsError,
    TaskNotFoundError,
)
from flattask.store import TaskStore


class TestSequence:
    """Test sequential naming."""

    def test_sequence_name(self):
        """Test 8-digit zero padding."""
        assert TaskStore.sequence_name(0) == "00000000"
        assert TaskStore.sequence_name(7) == "00000007"
        assert TaskStore.sequence_name(12345678) == "12345678"

    def test_empty_store(self, store):
        """Test that an empty store starts at zero."""
        assert store.next_sequence_id() == 0

    def test_counts_regular_files_only(self, store):
        """Test that directories and symlinks are not counted."""
        (store.root / "a").write_bytes(b"")
        (store.root / "b").write_bytes(b"")
        (store.root / "subdir").mkdir()
        os.symlink(store.root / "a", store.root / "link")

        assert store.next_sequence_id() == 2
        assert store.names() == ["a", "b"]

    def test_import_uses_next_id(self, store):
        """Test that imported records are named after the file count."""
        for name in ("x", "y", "z"):
            (store.root / name).write_bytes(b"")

        path = store.import_record(TaskRecord(title="imported"))
        assert path.name == "00000003"
        assert store.load("00000003") == TaskRecord(title="imported")

        path = store.import_record(TaskRecord(title="next"))
        assert path.name == "00000004"


class TestCreate:
    """Test exclusive creation and conflicts."""

    def test_add_by_title(self, store, sample_task):
        """Test saving a record under its title."""
        path = store.add(sample_task)
        assert path == store.root / "write report"
        assert path.read_bytes() == encode_task(sample_task)
        assert store.load("write report") == sample_task

    def test_duplicate_title(self, store, sample_task):
        """Test that an existing file is reported and left untouched."""
        existing = store.root / sample_task.title
        existing.write_bytes(b"keep me")

        with pytest.raises(TaskExistsError, match="already exists"):
            store.add(sample_task)
        assert existing.read_bytes() == b"keep me"

    def test_duplicate_is_recoverable(self, store, sample_task):
        """Test that a conflict leaves the store usable."""
        store.add(sample_task)
        with pytest.raises(TaskExistsError):
            store.add(sample_task)
        store.add(TaskRecord(title="another"))
        assert store.names() == ["another", "write report"]

    def test_create_exclusive_conflict_with_directory(self, store):
        """Test that a directory of the same name is a conflict too."""
        (store.root / "taken").mkdir()
        with pytest.raises(TaskExistsError):
            store.create_exclusive("taken")

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "../escape", "nul\0byte"])
    def test_invalid_names(self, store, name):
        """Test names that cannot be a single file in the store."""
        with pytest.raises(InvalidTaskNameError):
            store.create_exclusive(name)
        assert store.names() == []

    def test_title_with_separator(self, store):
        """Test that the store, not the model, rejects path separators."""
        record = TaskRecord(title="work/report")
        with pytest.raises(InvalidTaskNameError, match="must not contain"):
            store.add(record)

    def test_failed_write_leaves_no_file(self, store, sample_task, monkeypatch):
        """Test that a partial file is removed when writing fails."""
        def broken_write(record, sink):
            sink.write(b"partial")
            raise OSError(5, "Input/output error")

        monkeypatch.setattr(store_module, "write_task", broken_write)
        with pytest.raises(FileOperationError, match="Input/output error"):
            store.add(sample_task)
        assert not (store.root / sample_task.title).exists()

    def test_ensure_creates_parents(self, tmp_path):
        """Test that ensure() builds the whole path and is idempotent."""
        store = TaskStore(tmp_path / "deep" / "er" / "tasks")
        store.ensure()
        store.ensure()
        assert store.root.is_dir()


class TestRemoveAndLoad:
    """Test removal and loading."""

    def test_remove(self, store, sample_task):
        """Test removing an existing task."""
        store.add(sample_task)
        store.remove(sample_task.title)
        assert store.names() == []

    def test_remove_missing(self, store):
        """Test removing a task that does not exist."""
        with pytest.raises(TaskNotFoundError, match="no such task"):
            store.remove("ghost")

    def test_load_missing(self, store):
        """Test loading a task that does not exist."""
        with pytest.raises(TaskNotFoundError):
            store.load("ghost")

    def test_remove_rejects_paths(self, store, tmp_path):
        """Test that removal cannot reach outside the store."""
        outside = tmp_path / "outside"
        outside.write_bytes(b"")
        with pytest.raises(InvalidTaskNameError):
            store.remove("../outside")
        assert outside.exists()
