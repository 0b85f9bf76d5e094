"""Environment-driven settings for the chart data cache and query client."""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300
DEFAULT_MAX_ENTRIES = 100
DEFAULT_CACHE_PREFIX = "vizcore_chart_cache_"
DEFAULT_ORIGIN = "default"
DEFAULT_QUERY_API_URL = "http://localhost:8000"
DEFAULT_QUERY_TIMEOUT_SECONDS = 60.0


def _read_env(name: str, cast: Callable[[str], T], default: Optional[T]) -> Optional[T]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return cast(value.strip())
    except ValueError:
        kind = getattr(cast, "__name__", "value")
        raise ValueError(f"Environment variable '{name}' must be {kind}, got '{value}'.")


def get_env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get an environment variable as a string."""
    return _read_env(name, str, default)


def get_env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    """Get an environment variable as an integer."""
    return _read_env(name, int, default)


def get_env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    """Get an environment variable as a float."""
    return _read_env(name, float, default)


@dataclass(frozen=True)
class CacheSettings:
    """Result cache settings.

    ``db_path`` selects the sqlite-backed durable tier; when unset the durable
    tier lives in process memory. ``max_pages`` caps the sqlite page count so
    the durable tier has a storage quota.
    """

    ttl_seconds: int = DEFAULT_TTL_SECONDS
    max_entries: int = DEFAULT_MAX_ENTRIES
    prefix: str = DEFAULT_CACHE_PREFIX
    origin: str = DEFAULT_ORIGIN
    db_path: Optional[str] = None
    max_pages: Optional[int] = None

    @classmethod
    def from_env(cls) -> "CacheSettings":
        """Build settings from VIZ_CACHE_* environment variables."""
        ttl = get_env_int("VIZ_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS)
        max_entries = get_env_int("VIZ_CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES)
        if ttl is not None and ttl <= 0:
            logger.warning("Ignoring non-positive VIZ_CACHE_TTL_SECONDS=%s", ttl)
            ttl = DEFAULT_TTL_SECONDS
        return cls(
            ttl_seconds=ttl,
            max_entries=max(0, max_entries),
            prefix=get_env_str("VIZ_CACHE_PREFIX", DEFAULT_CACHE_PREFIX),
            origin=get_env_str("VIZ_CACHE_ORIGIN", DEFAULT_ORIGIN),
            db_path=get_env_str("VIZ_CACHE_DB_PATH"),
            max_pages=get_env_int("VIZ_CACHE_MAX_PAGES"),
        )


@dataclass(frozen=True)
class QueryClientSettings:
    """Query-execution HTTP client settings."""

    base_url: str = DEFAULT_QUERY_API_URL
    timeout_seconds: float = DEFAULT_QUERY_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "QueryClientSettings":
        """Build settings from VIZ_QUERY_* environment variables."""
        return cls(
            base_url=get_env_str("VIZ_QUERY_API_URL", DEFAULT_QUERY_API_URL).rstrip("/"),
            timeout_seconds=get_env_float(
                "VIZ_QUERY_TIMEOUT_SECONDS", DEFAULT_QUERY_TIMEOUT_SECONDS
            ),
        )
