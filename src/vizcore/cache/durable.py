"""Durable, origin-scoped key-value stores backing the second cache tier.

Stores hold opaque strings, mirroring a browser's per-origin local storage.
Writes past the storage quota raise ``StorageQuotaExceeded``.
"""

import sqlite3
from typing import Dict, List, Optional, Protocol, runtime_checkable

from vizcore.errors import StorageQuotaExceeded


@runtime_checkable
class DurableStore(Protocol):
    """Protocol for durable cache stores scoped to one origin."""

    origin: str

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store a string; raises StorageQuotaExceeded when out of space."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        ...

    def keys(self) -> List[str]:
        """Return all keys of this origin."""
        ...

    def close(self) -> None:
        """Release any underlying resources."""
        ...


class InMemoryDurableStore:
    """Dict-backed store with an optional character quota."""

    def __init__(self, origin: str = "default", quota_chars: Optional[int] = None) -> None:
        """Initialize an empty store; quota counts key and value characters."""
        self.origin = origin
        self._quota_chars = quota_chars
        self._items: Dict[str, str] = {}

    def _used_chars(self, excluding: Optional[str] = None) -> int:
        return sum(len(k) + len(v) for k, v in self._items.items() if k != excluding)

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None."""
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a string unless it would exceed the quota."""
        if self._quota_chars is not None:
            needed = self._used_chars(excluding=key) + len(key) + len(value)
            if needed > self._quota_chars:
                raise StorageQuotaExceeded(
                    f"Storage quota of {self._quota_chars} characters exceeded "
                    f"for origin '{self.origin}'."
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        """Return all keys in insertion order."""
        return list(self._items)

    def close(self) -> None:
        """Nothing to release."""
        return None


_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    origin TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    PRIMARY KEY (origin, key)
)
"""


def _is_storage_full(exc: sqlite3.Error) -> bool:
    code = getattr(exc, "sqlite_errorcode", None)
    if code is not None:
        return code == sqlite3.SQLITE_FULL
    return "full" in str(exc).lower()


class SqliteDurableStore:
    """SQLite-backed store; ``max_pages`` bounds the database size."""

    def __init__(
        self, db_path: str = ":memory:", origin: str = "default", max_pages: Optional[int] = None
    ) -> None:
        """Open (or create) the database and the entries table."""
        self.origin = origin
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False, isolation_level=None)
        self._conn.execute(_SCHEMA)
        if max_pages is not None and max_pages > 0:
            self._conn.execute(f"PRAGMA max_page_count = {int(max_pages)}")

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None."""
        row = self._conn.execute(
            "SELECT value FROM cache_entries WHERE origin = ? AND key = ?",
            (self.origin, key),
        ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Upsert a string; SQLITE_FULL surfaces as StorageQuotaExceeded."""
        try:
            self._conn.execute(
                "INSERT INTO cache_entries (origin, key, value) VALUES (?, ?, ?) "
                "ON CONFLICT (origin, key) DO UPDATE SET value = excluded.value",
                (self.origin, key, value),
            )
        except sqlite3.Error as exc:
            if _is_storage_full(exc):
                raise StorageQuotaExceeded(
                    f"SQLite cache store '{self._db_path}' is full for origin '{self.origin}'."
                ) from exc
            raise

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        self._conn.execute(
            "DELETE FROM cache_entries WHERE origin = ? AND key = ?", (self.origin, key)
        )

    def keys(self) -> List[str]:
        """Return all keys of this origin."""
        rows = self._conn.execute(
            "SELECT key FROM cache_entries WHERE origin = ? ORDER BY rowid", (self.origin,)
        ).fetchall()
        return [row[0] for row in rows]

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()
