import pytest

from vizcore.cache.durable import DurableStore, InMemoryDurableStore, SqliteDurableStore
from vizcore.errors import ErrorCode, StorageQuotaExceeded


def test_stores_satisfy_protocol(tmp_path):
    """Both implementations are DurableStores."""
    assert isinstance(InMemoryDurableStore(), DurableStore)
    store = SqliteDurableStore(str(tmp_path / "p.db"))
    assert isinstance(store, DurableStore)
    store.close()


def test_in_memory_quota():
    """Writes past the character quota raise; replacing a key reuses its space."""
    store = InMemoryDurableStore(quota_chars=10)
    store.set_item("k1", "abc")
    store.set_item("k1", "abcdefgh")
    with pytest.raises(StorageQuotaExceeded) as exc_info:
        store.set_item("k2", "x")
    assert exc_info.value.code is ErrorCode.STORAGE_EXHAUSTED
    assert store.keys() == ["k1"]


class TestSqliteDurableStore:
    """Unit tests for the sqlite-backed store."""

    @pytest.fixture
    def store(self, tmp_path):
        store = SqliteDurableStore(str(tmp_path / "cache.db"), origin="app")
        yield store
        store.close()

    def test_round_trip_and_upsert(self, store):
        """Values are stored, replaced and removed."""
        assert store.get_item("k") is None
        store.set_item("k", "v1")
        store.set_item("k", "v2")
        assert store.get_item("k") == "v2"
        store.remove_item("k")
        store.remove_item("k")
        assert store.get_item("k") is None

    def test_keys_in_insertion_order(self, store):
        """Keys come back in the order they were first written."""
        for key in ("b", "a", "c"):
            store.set_item(key, key)
        assert store.keys() == ["b", "a", "c"]

    def test_origins_are_isolated(self, store, tmp_path):
        """A second origin in the same database sees none of the first's keys."""
        store.set_item("shared", "app-value")
        other = SqliteDurableStore(str(tmp_path / "cache.db"), origin="other")
        try:
            assert other.get_item("shared") is None
            assert other.keys() == []
            other.set_item("shared", "other-value")
            assert store.get_item("shared") == "app-value"
        finally:
            other.close()

    def test_page_limit_raises_quota_exceeded(self, tmp_path):
        """A capped database surfaces SQLITE_FULL as StorageQuotaExceeded."""
        store = SqliteDurableStore(str(tmp_path / "small.db"), max_pages=3)
        try:
            store.set_item("small", "x")
            with pytest.raises(StorageQuotaExceeded):
                store.set_item("big", "x" * 200_000)
            assert store.get_item("small") == "x"
            assert store.get_item("big") is None
        finally:
            store.close()
