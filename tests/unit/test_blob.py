"""
Unit tests for blob stores.
"""

import pytest

from logjournal.core.exceptions import StorageError
from logjournal.store import FileBlobStore, LogStore, MemoryBlobStore
from logjournal.store.schemas import LogEntryCreate


class TestMemoryBlobStore:
    """Test the in-memory backend."""

    def test_read_write_delete(self):
        """Test basic operations."""
        blobs = MemoryBlobStore()
        assert blobs.read("k") is None

        blobs.write("k", "v")
        assert blobs.read("k") == "v"

        blobs.delete("k")
        assert blobs.read("k") is None


class TestFileBlobStore:
    """Test the directory backend."""

    def test_round_trip(self, temp_dir):
        """Test values survive a new store instance."""
        FileBlobStore(temp_dir / "data").write("log-storage", '{"a": "한글"}')
        assert FileBlobStore(temp_dir / "data").read("log-storage") == '{"a": "한글"}'

    def test_key_is_sanitized(self, temp_dir):
        """Test keys cannot escape the directory."""
        blobs = FileBlobStore(temp_dir)
        path = blobs.path_for("../evil/key")
        assert path.parent == temp_dir
        assert path.name == ".._evil_key.json"

    def test_no_temp_files_left(self, temp_dir):
        """Test atomic writes clean up after themselves."""
        blobs = FileBlobStore(temp_dir)
        blobs.write("k", "1")
        blobs.write("k", "2")
        assert [p.name for p in temp_dir.iterdir()] == ["k.json"]

    def test_delete_missing_is_fine(self, temp_dir):
        """Test deleting an absent key does not raise."""
        FileBlobStore(temp_dir).delete("missing")

    def test_write_failure_raises_storage_error(self, temp_dir):
        """Test OS errors surface as StorageError."""
        blocker = temp_dir / "file"
        blocker.write_text("x")
        with pytest.raises(StorageError) as exc_info:
            FileBlobStore(blocker / "sub").write("k", "v")
        assert exc_info.value.key == "k"


class BrokenBlobStore(MemoryBlobStore):
    def write(self, key, value):
        raise StorageError("disk full", key=key)


class TestStoreWithFailingBackend:
    """Test the store keeps working in memory when persistence fails."""

    def test_mutation_survives_write_failure(self, clock):
        """Test a failed write is logged and state stays in memory."""
        store = LogStore(BrokenBlobStore(), clock=clock)
        log_id = store.create_log(LogEntryCreate(title="제목"))
        assert store.get_log(log_id).title == "제목"
