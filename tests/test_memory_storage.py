"""Tests for the in-process storage backend."""

import threading
from datetime import UTC, datetime, timedelta

import pytest

from persistent_cache.models.model_entry import StoredEntry
from persistent_cache.storage.memory_storage import RAMStorage


@pytest.fixture
def ram() -> RAMStorage:
    """Create an empty RAMStorage."""
    return RAMStorage()


class TestRAMStorage:
    """Tests for RAMStorage class."""

    def test_has_dict_storage(self, ram: RAMStorage) -> None:
        """Test the backing store is a dict."""
        assert isinstance(ram.storage, dict)
        assert ram.storage_details == "ram"

    def test_save_with_current_time(self, ram: RAMStorage) -> None:
        """Test default timestamp is taken at write time."""
        before = datetime.now(UTC)
        ram.save("testkey", b"testvalue")
        after = datetime.now(UTC)

        entry = ram.lookup("testkey")
        assert isinstance(entry, StoredEntry)
        assert entry.value == b"testvalue"
        assert before <= entry.timestamp <= after

    def test_save_with_timestamp(self, ram: RAMStorage) -> None:
        """Test an explicit timestamp is stored as given."""
        written_at = datetime.now(UTC) - timedelta(seconds=2500)
        ram.save("testkey", b"testvalue", written_at)
        assert ram.lookup("testkey").timestamp == written_at

    def test_overwrite(self, ram: RAMStorage) -> None:
        """Test saving an existing key replaces the entry."""
        ram.save("testkey", b"testvalue")
        ram.save("testkey", b"testvalue2")
        assert ram.lookup("testkey").value == b"testvalue2"
        assert ram.size() == 1

    def test_values_stored_unmodified(self, ram: RAMStorage) -> None:
        """Test keys and values of any type are kept as given."""
        payload = {"nested": [1, 2, 3]}
        ram.save(42, payload)
        assert ram.lookup(42).value is payload

    def test_lookup_missing(self, ram: RAMStorage) -> None:
        """Test missing keys return None."""
        assert ram.lookup("nope") is None

    def test_delete(self, ram: RAMStorage) -> None:
        """Test deleting present and missing keys."""
        ram.save("testkey", b"testvalue")
        ram.delete("testkey")
        ram.delete("testkey")
        assert ram.lookup("testkey") is None

    def test_keys_insertion_order(self, ram: RAMStorage) -> None:
        """Test keys come back in insertion order."""
        assert ram.keys() == []
        ram.save("one", b"1")
        ram.save("two", b"2")
        ram.save("three", b"3")
        assert ram.keys() == ["one", "two", "three"]
        assert ram.size() == 3

    def test_clear(self, ram: RAMStorage) -> None:
        """Test clear empties the map and it stays usable."""
        ram.save("one", b"1")
        ram.clear()
        assert ram.size() == 0
        assert ram.keys() == []

        ram.save("one", b"1")
        assert ram.lookup("one").value == b"1"

    def test_concurrent_writers(self, ram: RAMStorage) -> None:
        """Test many threads writing distinct keys lose nothing."""

        def writer(thread_id: int) -> None:
            for i in range(200):
                ram.save(f"{thread_id}-{i}", b"x")
                ram.lookup(f"{thread_id}-{i}")
                ram.keys()

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert ram.size() == 8 * 200
