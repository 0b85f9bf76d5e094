"""HTTP client for the backend execute-query endpoint."""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from vizcore.config import QueryClientSettings
from vizcore.errors import ErrorCode, QueryExecutionError
from vizcore.query.executor import QueryResult

logger = logging.getLogger(__name__)

EXECUTE_QUERY_PATH = "/api/v1/backend/excecute-query/{connection_id}/"


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        for field in ("message", "detail", "error"):
            if body.get(field):
                return str(body[field])
    return response.reason_phrase


class HttpQueryExecutor:
    """Executes chart queries through the backend REST API."""

    def __init__(
        self,
        settings: Optional[QueryClientSettings] = None,
        *,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize with API settings, extra headers and an optional transport."""
        self._settings = settings or QueryClientSettings.from_env()
        self._headers = dict(headers or {})
        self._transport = transport

    def _payload(
        self, query: str, from_date: Optional[str], to_date: Optional[str]
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        # The backend applies a date filter only for a complete range.
        if from_date and to_date:
            payload["from_date"] = from_date
            payload["to_date"] = to_date
        return payload

    async def execute(
        self,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> QueryResult:
        """POST the query and normalize the response into a QueryResult."""
        url = self._settings.base_url + EXECUTE_QUERY_PATH.format(connection_id=connection_id)
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                headers=self._headers,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json=self._payload(query, from_date, to_date))
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            logger.warning(
                "viz_query_failed connection=%s status=%s detail=%s",
                connection_id,
                exc.response.status_code,
                detail,
            )
            raise QueryExecutionError(
                f"Query execution failed: {detail}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.TimeoutException as exc:
            logger.warning("viz_query_timeout connection=%s", connection_id)
            raise QueryExecutionError(
                "Query execution timed out.", code=ErrorCode.UPSTREAM_TIMEOUT
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("viz_query_unreachable connection=%s error=%s", connection_id, exc)
            raise QueryExecutionError(
                f"Query service unreachable: {exc}", code=ErrorCode.UPSTREAM_UNAVAILABLE
            ) from exc
        except ValueError as exc:
            raise QueryExecutionError(
                "Query service returned a non-JSON response.",
                code=ErrorCode.MALFORMED_RESPONSE,
            ) from exc

        try:
            return QueryResult.from_response(body)
        except ValidationError as exc:
            raise QueryExecutionError(
                "Query service returned an unexpected payload.",
                code=ErrorCode.MALFORMED_RESPONSE,
            ) from exc
