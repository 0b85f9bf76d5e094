"""In-process cache tier."""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached payload with insertion time and time-to-live (seconds)."""

    payload: Any
    inserted_at: float
    ttl: float

    def is_valid(self, now: Optional[float] = None) -> bool:
        """Return True while the entry is younger than its TTL."""
        current = time.time() if now is None else now
        return (current - self.inserted_at) < self.ttl

    def to_dict(self) -> Dict[str, Any]:
        return {"payload": self.payload, "insertedAt": self.inserted_at, "ttl": self.ttl}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CacheEntry":
        """Rebuild an entry; raises KeyError/TypeError/ValueError on malformed input."""
        return cls(
            payload=raw["payload"],
            inserted_at=float(raw["insertedAt"]),
            ttl=float(raw["ttl"]),
        )


class MemoryTier:
    """Bounded key -> entry map evicting the oldest insertion past capacity."""

    def __init__(self, max_entries: int = 100) -> None:
        """Initialize with a capacity ceiling; 0 or less disables the ceiling."""
        self._max_entries = max_entries
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key, dropping it if expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid():
            self._entries.pop(key, None)
            return None
        return entry

    def set(self, key: str, entry: CacheEntry) -> Optional[str]:
        """Store an entry; returns the evicted key, if any."""
        self._entries.pop(key, None)
        self._entries[key] = entry
        if self._max_entries > 0 and len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.info("viz_cache_evict tier=memory key=%s", evicted)
            return evicted
        return None

    def delete(self, key: str) -> bool:
        """Remove an entry; returns True if it existed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Remove every entry and return how many were dropped."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def __contains__(self, key: object) -> bool:
        """Return True if key is present (expired or not)."""
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        """Iterate keys in insertion order."""
        return iter(list(self._entries))

    def __len__(self) -> int:
        """Return number of entries."""
        return len(self._entries)
