"""Two-tier chart query result cache.

The fast tier is an in-process map; the durable tier is an origin-scoped
string store. The cache is an optimization only: every durable-tier failure
is logged and absorbed, and callers must stay correct with an empty cache.
"""

import copy
import json
import logging
import time
from typing import Any, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

from opentelemetry import trace

from vizcore.cache.durable import DurableStore, InMemoryDurableStore, SqliteDurableStore
from vizcore.cache.keys import make_cache_key
from vizcore.cache.memory import CacheEntry, MemoryTier
from vizcore.config import CacheSettings
from vizcore.errors import StorageQuotaExceeded
from vizcore.observability import viz_metrics

logger = logging.getLogger(__name__)


@runtime_checkable
class ChartCache(Protocol):
    """Protocol implemented by result caches injected into the chart service."""

    def get(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Optional[Any]:
        """Return the cached payload, or None."""
        ...

    def set(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        payload: Any,
        ttl: Optional[float] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> None:
        """Store a payload."""
        ...

    def invalidate(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> None:
        """Remove one entry from every tier."""
        ...


class ResultCache:
    """Memory + durable cache keyed by owner, connection, query and date range."""

    def __init__(
        self,
        durable: Optional[DurableStore] = None,
        settings: Optional[CacheSettings] = None,
    ) -> None:
        """Initialize tiers; settings default to the VIZ_CACHE_* environment."""
        self._settings = settings or CacheSettings.from_env()
        self._memory = MemoryTier(max_entries=self._settings.max_entries)
        if durable is None:
            durable = InMemoryDurableStore(origin=self._settings.origin)
        self._durable = durable
        self._prefix = self._settings.prefix
        self._tracer = trace.get_tracer(__name__)

    @property
    def default_ttl(self) -> float:
        """Return the TTL applied when set() is called without one."""
        return float(self._settings.ttl_seconds)

    def key_for(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> str:
        """Return the cache key for a chart query."""
        return make_cache_key(
            owner_id, connection_id, query, from_date, to_date, prefix=self._prefix
        )

    def get(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Optional[Any]:
        """Return the cached payload, promoting durable hits into memory."""
        key = self.key_for(owner_id, connection_id, query, from_date, to_date)

        entry = self._memory.get(key)
        if entry is not None:
            self._record("viz.cache.hit", tier="memory")
            return copy.deepcopy(entry.payload)

        try:
            raw = self._durable.get_item(key)
        except Exception as exc:
            logger.warning("viz_cache_read_failed key=%s error=%s", key, exc)
            raw = None

        if raw is None:
            self._record("viz.cache.miss")
            return None

        entry = _decode(raw)
        if entry is None or not entry.is_valid():
            self._remove_durable(key)
            self._record("viz.cache.miss", reason="expired" if entry else "corrupt")
            return None

        self._store_memory(key, entry)
        self._record("viz.cache.hit", tier="durable")
        return copy.deepcopy(entry.payload)

    def set(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        payload: Any,
        ttl: Optional[float] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> None:
        """Store a payload in both tiers; durable failures are absorbed.

        The payload is stored as its JSON form in both tiers: Decimal, datetime
        and other non-JSON values come back as strings from either tier.
        """
        key = self.key_for(owner_id, connection_id, query, from_date, to_date)
        entry = CacheEntry(
            payload=_to_json_types(payload),
            inserted_at=time.time(),
            ttl=self.default_ttl if ttl is None else float(ttl),
        )
        self._store_memory(key, entry)
        if self._write_durable(key, entry):
            self._sweep_expired()

    def invalidate(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> None:
        """Remove one entry from both tiers so the next load refetches."""
        key = self.key_for(owner_id, connection_id, query, from_date, to_date)
        with self._tracer.start_as_current_span("viz.cache.invalidate") as span:
            span.set_attribute("viz.cache.scope", "entry")
            span.set_attribute("viz.cache.connection_id", str(connection_id))
            self._memory.delete(key)
            self._remove_durable(key)
            logger.info(
                "viz_cache_invalidate owner=%s connection=%s key=%s",
                owner_id,
                connection_id,
                key,
            )

    def clear(self) -> int:
        """Remove every entry of this cache's prefix; returns durable entries removed."""
        with self._tracer.start_as_current_span("viz.cache.invalidate") as span:
            span.set_attribute("viz.cache.scope", "global")
            self._memory.clear()
            removed = 0
            for key in self._durable_keys():
                self._remove_durable(key)
                removed += 1
            span.set_attribute("viz.cache.entries_cleared", removed)
            logger.info("viz_cache_clear origin=%s removed=%d", self._durable.origin, removed)
            return removed

    def close(self) -> None:
        """Drop the memory tier and close the durable store."""
        self._memory.clear()
        self._durable.close()

    def __enter__(self) -> "ResultCache":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _store_memory(self, key: str, entry: CacheEntry) -> None:
        if self._memory.set(key, entry) is not None:
            self._record("viz.cache.evict", tier="memory")

    def _write_durable(self, key: str, entry: CacheEntry) -> bool:
        encoded = json.dumps(entry.to_dict(), default=str, separators=(",", ":"))
        try:
            self._durable.set_item(key, encoded)
            return True
        except StorageQuotaExceeded:
            logger.warning(
                "viz_cache_quota_exceeded origin=%s; evicting oldest entries",
                self._durable.origin,
            )
        except Exception as exc:
            logger.warning("viz_cache_write_failed key=%s error=%s", key, exc)
            return False

        self._evict_oldest_half()
        try:
            self._durable.set_item(key, encoded)
            return True
        except Exception as exc:
            logger.warning("viz_cache_write_dropped key=%s error=%s", key, exc)
            self._record("viz.cache.dropped")
            return False

    def _durable_keys(self) -> List[str]:
        try:
            return [key for key in self._durable.keys() if key.startswith(self._prefix)]
        except Exception as exc:
            logger.warning("viz_cache_list_failed origin=%s error=%s", self._durable.origin, exc)
            return []

    def _durable_entries(self) -> Iterator[Tuple[str, Optional[CacheEntry]]]:
        for key in self._durable_keys():
            try:
                raw = self._durable.get_item(key)
            except Exception as exc:
                logger.warning("viz_cache_read_failed key=%s error=%s", key, exc)
                continue
            if raw is not None:
                yield key, _decode(raw)

    def _remove_durable(self, key: str) -> None:
        try:
            self._durable.remove_item(key)
        except Exception as exc:
            logger.warning("viz_cache_remove_failed key=%s error=%s", key, exc)

    def _sweep_expired(self) -> None:
        now = time.time()
        stale = [
            key for key, entry in self._durable_entries() if not entry or not entry.is_valid(now)
        ]
        for key in stale:
            self._remove_durable(key)
            self._memory.delete(key)
        if stale:
            logger.debug("viz_cache_sweep removed=%d", len(stale))

    def _evict_oldest_half(self) -> None:
        entries = [(key, entry) for key, entry in self._durable_entries() if entry is not None]
        entries.sort(key=lambda item: item[1].inserted_at)
        doomed = entries[: len(entries) // 2]
        for key, _ in doomed:
            self._remove_durable(key)
            self._memory.delete(key)
        logger.info("viz_cache_evict tier=durable removed=%d", len(doomed))
        if doomed:
            self._record("viz.cache.evict", value=len(doomed), tier="durable")

    def _record(self, name: str, value: int = 1, **attributes: Any) -> None:
        viz_metrics.add_counter(name, value, attributes=attributes)


class NullResultCache:
    """Cache that stores nothing; for tests and cache-less deployments."""

    def get(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Optional[Any]:
        """Always miss."""
        return None

    def set(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        payload: Any,
        ttl: Optional[float] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> None:
        """Discard the payload."""
        return None

    def invalidate(
        self,
        owner_id: str,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> None:
        """Nothing to remove."""
        return None


def _to_json_types(payload: Any) -> Any:
    return json.loads(json.dumps(payload, default=str))


def _decode(raw: str) -> Optional[CacheEntry]:
    try:
        return CacheEntry.from_dict(json.loads(raw))
    except (ValueError, KeyError, TypeError):
        return None


def build_result_cache(settings: Optional[CacheSettings] = None) -> ResultCache:
    """Construct a ResultCache whose durable tier follows the settings.

    A configured ``db_path`` selects the sqlite store; otherwise the durable
    tier is kept in process memory.
    """
    settings = settings or CacheSettings.from_env()
    durable: DurableStore
    if settings.db_path:
        durable = SqliteDurableStore(
            settings.db_path, origin=settings.origin, max_pages=settings.max_pages
        )
    else:
        durable = InMemoryDurableStore(origin=settings.origin)
    return ResultCache(durable=durable, settings=settings)
