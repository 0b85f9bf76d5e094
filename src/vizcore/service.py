"""Cache-aware chart data loading: fetch, shape, memoize."""

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from opentelemetry import trace

from vizcore.cache.keys import make_cache_key
from vizcore.cache.result_cache import ChartCache, NullResultCache
from vizcore.query.executor import QueryExecutor
from vizcore.viz.fallback import repair_missing_keys
from vizcore.viz.models import ChartDataConfig, ChartKind, coerce_chart_kind
from vizcore.viz.shape import shape

logger = logging.getLogger(__name__)


@dataclass
class ChartResult:
    """Shaped chart data plus the rows and metadata it was built from."""

    config: ChartDataConfig
    chart_kind: ChartKind
    rows: List[Any] = field(default_factory=list)
    row_count: int = 0
    execution_time_ms: float = 0.0
    cached_at: Optional[str] = None
    from_cache: bool = False

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for the result cache."""
        return {
            "chartKind": self.chart_kind.value,
            "chart": self.config.to_dict(),
            "rows": copy.deepcopy(list(self.rows)),
            "metadata": {
                "rowCount": self.row_count,
                "executionTime": self.execution_time_ms,
                "cachedAt": self.cached_at,
            },
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], chart_kind: ChartKind) -> "ChartResult":
        """Rebuild a cached result, re-shaping the rows if the chart kind changed.

        A cached chart whose keys no longer match its rows is repaired.
        """
        rows = copy.deepcopy(list(payload["rows"]))
        metadata = payload.get("metadata") or {}
        cached_kind = coerce_chart_kind(payload.get("chartKind"))
        if cached_kind is chart_kind:
            config = repair_missing_keys(ChartDataConfig.from_dict(payload["chart"]))
        else:
            config = shape(rows, chart_kind)
        return cls(
            config=config,
            chart_kind=chart_kind,
            rows=rows,
            row_count=int(metadata.get("rowCount") or len(rows)),
            execution_time_ms=float(metadata.get("executionTime") or 0.0),
            cached_at=metadata.get("cachedAt"),
            from_cache=True,
        )


class ChartDataService:
    """Loads chart data through the result cache and the query executor."""

    def __init__(
        self,
        executor: QueryExecutor,
        cache: Optional[ChartCache] = None,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        """Initialize with an executor, an optional cache and a TTL override."""
        self._executor = executor
        self._cache: ChartCache = cache if cache is not None else NullResultCache()
        self._ttl_seconds = ttl_seconds
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._tracer = trace.get_tracer(__name__)

    def _cached_result(
        self,
        chart_id: str,
        connection_id: str,
        query: str,
        kind: ChartKind,
        from_date: Optional[str],
        to_date: Optional[str],
    ) -> Optional[ChartResult]:
        payload = self._cache.get(chart_id, connection_id, query, from_date, to_date)
        if payload is None:
            return None
        try:
            return ChartResult.from_payload(payload, kind)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("viz_cache_payload_invalid chart=%s error=%s", chart_id, exc)
            self._cache.invalidate(chart_id, connection_id, query, from_date, to_date)
            return None

    async def load_chart(
        self,
        chart_id: str,
        connection_id: str,
        query: str,
        chart_kind: Union[ChartKind, str],
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        bypass_cache: bool = False,
    ) -> ChartResult:
        """Return shaped chart data, executing the query only on a cache miss.

        Args:
            chart_id: Owner of the result; part of the cache key.
            connection_id: Database connection the query runs against.
            query: SQL text; whitespace differences share a cache entry.
            chart_kind: line, bar, pie or area.
            from_date: Optional range start.
            to_date: Optional range end.
            bypass_cache: Drop any cached entry and refetch.

        Raises:
            QueryExecutionError: The query-execution service failed. Nothing is
                cached in that case.
        """
        kind = coerce_chart_kind(chart_kind)
        with self._tracer.start_as_current_span("viz.chart.load") as span:
            span.set_attribute("viz.chart.kind", kind.value)
            span.set_attribute("viz.chart.bypass_cache", bypass_cache)

            if bypass_cache:
                self._cache.invalidate(chart_id, connection_id, query, from_date, to_date)
            else:
                cached = self._cached_result(
                    chart_id, connection_id, query, kind, from_date, to_date
                )
                if cached is not None:
                    span.set_attribute("viz.cache.hit", True)
                    return cached

            span.set_attribute("viz.cache.hit", False)
            lock_key = make_cache_key(chart_id, connection_id, query, from_date, to_date)
            lock = self._locks.setdefault(lock_key, asyncio.Lock())
            self._lock_users[lock_key] = self._lock_users.get(lock_key, 0) + 1
            try:
                async with lock:
                    if not bypass_cache:
                        cached = self._cached_result(
                            chart_id, connection_id, query, kind, from_date, to_date
                        )
                        if cached is not None:
                            return cached
                    return await self._fetch(
                        chart_id, connection_id, query, kind, from_date, to_date, span
                    )
            finally:
                # The lock lives while any task holds or awaits it.
                remaining = self._lock_users[lock_key] - 1
                if remaining:
                    self._lock_users[lock_key] = remaining
                else:
                    del self._lock_users[lock_key]
                    del self._locks[lock_key]

    async def _fetch(
        self,
        chart_id: str,
        connection_id: str,
        query: str,
        kind: ChartKind,
        from_date: Optional[str],
        to_date: Optional[str],
        span: Any,
    ) -> ChartResult:
        try:
            result = await self._executor.execute(connection_id, query, from_date, to_date)
        except Exception:
            span.set_attribute("viz.status", "error")
            raise

        chart = ChartResult(
            config=shape(result.rows, kind),
            chart_kind=kind,
            rows=list(result.rows),
            row_count=result.row_count,
            execution_time_ms=result.execution_time_ms,
            cached_at=result.cached_at,
        )
        span.set_attribute("viz.status", "ok")
        span.set_attribute("viz.chart.row_count", chart.row_count)
        logger.info(
            "viz_chart_loaded chart=%s connection=%s kind=%s rows=%d",
            chart_id,
            connection_id,
            kind.value,
            chart.row_count,
        )
        self._cache.set(
            chart_id,
            connection_id,
            query,
            chart.to_payload(),
            self._ttl_seconds,
            from_date,
            to_date,
        )
        return chart
