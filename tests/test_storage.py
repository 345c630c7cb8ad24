"""Tests for document storage and keyed locks."""

import json
import threading
from unittest.mock import patch

import pytest

from taskmanager.errors import CorruptionError, StorageError
from taskmanager.storage import InMemoryDocumentStore, JsonFileDocumentStore, KeyedLocks


@pytest.fixture
def store(tmp_path):
    return JsonFileDocumentStore(tmp_path / "data")


class TestJsonFileDocumentStore:
    """Tests for the JSON file backend."""

    def test_missing_document_reads_empty(self, store):
        """A document that was never written is an empty array."""
        assert store.read("tasks_nobody") == []

    def test_write_then_read(self, store):
        """Written records come back unchanged and the file is readable JSON."""
        records = [{"id": "1", "title": "Buy milk"}, {"id": "2", "title": "Café"}]
        store.write("tasks_a", records)

        assert store.read("tasks_a") == records
        on_disk = json.loads(store.path_for("tasks_a").read_text(encoding="utf-8"))
        assert on_disk == records

    def test_write_creates_data_dir(self, tmp_path):
        """The data directory is created on first write."""
        store = JsonFileDocumentStore(tmp_path / "nested" / "data")
        store.write("users", [])
        assert (tmp_path / "nested" / "data" / "users.json").exists()

    def test_failed_replace_keeps_previous_document(self, store):
        """A write that fails midway leaves the old document and no temp files."""
        store.write("tasks_a", [{"id": "old"}])

        with patch("taskmanager.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                store.write("tasks_a", [{"id": "new"}])

        assert store.read("tasks_a") == [{"id": "old"}]
        assert [p.name for p in store.data_dir.iterdir()] == ["tasks_a.json"]

    def test_invalid_json_is_corruption(self, store):
        """Undecodable content raises CorruptionError instead of reading as empty."""
        store.data_dir.mkdir(parents=True)
        store.path_for("tasks_a").write_text("[{not json", encoding="utf-8")

        with pytest.raises(CorruptionError):
            store.read("tasks_a")

    def test_non_array_is_corruption(self, store):
        """A top-level object is not a valid document."""
        store.data_dir.mkdir(parents=True)
        store.path_for("users").write_text('{"id": "1"}', encoding="utf-8")

        with pytest.raises(CorruptionError):
            store.read("users")

    @pytest.mark.parametrize("key", ["../etc/passwd", "tasks/1", "", "a.b"])
    def test_rejects_unsafe_keys(self, store, key):
        """Keys that could escape the data directory are refused."""
        with pytest.raises(StorageError):
            store.read(key)


class TestInMemoryDocumentStore:
    """Tests for the in-memory backend."""

    def test_reads_are_copies(self):
        """Mutating a read result does not change the stored document."""
        store = InMemoryDocumentStore()
        store.write("users", [{"id": "1"}])

        records = store.read("users")
        records[0]["id"] = "changed"
        records.append({"id": "2"})

        assert store.read("users") == [{"id": "1"}]


class TestKeyedLocks:
    """Tests for per-key mutual exclusion."""

    def test_timeout_raises_storage_error(self):
        """Waiting longer than the timeout surfaces as StorageError."""
        locks = KeyedLocks(timeout=0.05)

        with locks.hold("owner-a"):
            with pytest.raises(StorageError):
                with locks.hold("owner-a"):
                    pass

    def test_different_keys_do_not_contend(self):
        """Holding one key never blocks another."""
        locks = KeyedLocks(timeout=0.05)

        with locks.hold("owner-a"):
            with locks.hold("owner-b"):
                pass

    def test_lock_is_released_after_error(self):
        """An exception inside the block releases the lock."""
        locks = KeyedLocks(timeout=0.05)

        with pytest.raises(RuntimeError):
            with locks.hold("owner-a"):
                raise RuntimeError("boom")

        with locks.hold("owner-a"):
            pass

    def test_serializes_same_key_across_threads(self):
        """Only one thread at a time is inside a block for the same key."""
        locks = KeyedLocks(timeout=5)
        inside = 0
        max_inside = 0
        counter_lock = threading.Lock()

        def worker():
            nonlocal inside, max_inside
            for _ in range(50):
                with locks.hold("owner-a"):
                    with counter_lock:
                        inside += 1
                        max_inside = max(max_inside, inside)
                    with counter_lock:
                        inside -= 1

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert max_inside == 1

    def test_idle_locks_are_dropped(self):
        """A key's lock lives only while someone holds or waits for it."""
        locks = KeyedLocks(timeout=0.05)

        with locks.hold("owner-a"):
            assert "owner-a" in locks._locks
            with pytest.raises(StorageError):
                with locks.hold("owner-a"):
                    pass
            assert "owner-a" in locks._locks

        assert locks._locks == {}
        assert locks._users == {}
