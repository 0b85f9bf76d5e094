"""Stable cache key derivation for chart query results."""

import hashlib
from typing import Optional

from vizcore.config import DEFAULT_CACHE_PREFIX


def normalize_query(query: str) -> str:
    """Collapse runs of whitespace and trim so formatting does not split entries."""
    return " ".join((query or "").split())


def make_cache_key(
    owner_id: str,
    connection_id: str,
    query: str,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    *,
    prefix: str = DEFAULT_CACHE_PREFIX,
) -> str:
    """Derive the cache key for a chart query.

    The key is the prefix followed by a SHA256 digest of the owner, connection,
    normalized query and date bounds. Missing bounds encode as empty strings.
    """
    parts = [
        str(owner_id),
        str(connection_id),
        normalize_query(query),
        from_date or "",
        to_date or "",
    ]
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
    return f"{prefix}{digest}"
