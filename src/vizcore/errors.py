"""Error taxonomy for chart data loading and caching."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Bounded error codes surfaced to callers and observability."""

    QUERY_FAILED = "QUERY_FAILED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    STORAGE_EXHAUSTED = "STORAGE_EXHAUSTED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class VizCoreError(Exception):
    """Base class for vizcore errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, *, code: Optional[ErrorCode] = None) -> None:
        """Initialize with a message and optional code override."""
        super().__init__(message)
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Return a serializable error envelope."""
        return {"code": self.code.value, "message": str(self)}


class QueryExecutionError(VizCoreError):
    """Raised when the query-execution collaborator fails.

    Never swallowed by the engine; callers render their own error state.
    """

    code = ErrorCode.QUERY_FAILED

    def __init__(
        self,
        message: str,
        *,
        code: Optional[ErrorCode] = None,
        status_code: Optional[int] = None,
    ) -> None:
        """Initialize with optional upstream HTTP status."""
        super().__init__(message, code=code)
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Return a serializable error envelope including upstream status."""
        payload = super().to_dict()
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        return payload


class StorageQuotaExceeded(VizCoreError):
    """Raised by durable cache stores when a write exceeds the storage quota."""

    code = ErrorCode.STORAGE_EXHAUSTED
