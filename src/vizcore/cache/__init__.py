"""Two-tier chart query result cache."""

from vizcore.cache.durable import DurableStore, InMemoryDurableStore, SqliteDurableStore
from vizcore.cache.keys import make_cache_key, normalize_query
from vizcore.cache.result_cache import ChartCache, NullResultCache, ResultCache, build_result_cache

__all__ = [
    "ChartCache",
    "DurableStore",
    "InMemoryDurableStore",
    "NullResultCache",
    "ResultCache",
    "SqliteDurableStore",
    "build_result_cache",
    "make_cache_key",
    "normalize_query",
]
