"""
Tests for snapshot stores.
"""

from landmark_lens.cache.snapshot_store import FileSnapshotStore, InMemorySnapshotStore


class TestInMemorySnapshotStore:
    """Test process-local slot."""

    def test_round_trip(self):
        """Test save, load and remove."""
        store = InMemorySnapshotStore()

        assert store.load("k") is None
        store.save("k", "payload")
        assert store.load("k") == "payload"
        store.remove("k")
        assert store.load("k") is None

    def test_remove_missing_is_noop(self):
        """Test removing an unknown key."""
        InMemorySnapshotStore().remove("missing")


class TestFileSnapshotStore:
    """Test file-backed slot."""

    def test_save_creates_directory(self, tmp_path):
        """Test directory is created on first save."""
        directory = tmp_path / "nested" / "snapshots"
        store = FileSnapshotStore(directory)

        store.save("cache", '{"a": 1}')

        assert (directory / "cache.json").read_text(encoding="utf-8") == '{"a": 1}'
        assert store.load("cache") == '{"a": 1}'

    def test_save_replaces_previous(self, tmp_path):
        """Test later saves overwrite and leave no temp file."""
        store = FileSnapshotStore(tmp_path)
        store.save("cache", "one")
        store.save("cache", "two")

        assert store.load("cache") == "two"
        assert not (tmp_path / "cache.tmp").exists()

    def test_missing_file_loads_none(self, tmp_path):
        """Test loading an unknown key."""
        assert FileSnapshotStore(tmp_path).load("cache") is None

    def test_remove(self, tmp_path):
        """Test removing deletes the file."""
        store = FileSnapshotStore(tmp_path)
        store.save("cache", "data")

        store.remove("cache")
        store.remove("cache")

        assert store.load("cache") is None
