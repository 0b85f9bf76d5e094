"""Query-execution collaborator contract."""

from typing import Any, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QueryResult(BaseModel):
    """Rows and metadata returned by the query-execution service."""

    model_config = ConfigDict(extra="ignore")

    rows: List[Any] = Field(default_factory=list)
    row_count: int = 0
    execution_time_ms: float = 0.0
    cached_at: Optional[str] = None

    @model_validator(mode="after")
    def _default_row_count(self) -> "QueryResult":
        if self.row_count <= 0 and self.rows:
            self.row_count = len(self.rows)
        return self

    @classmethod
    def from_response(cls, body: Any) -> "QueryResult":
        """Normalize an execute-query response body.

        Rows come from ``result``, else ``data``, else nothing.
        """
        if not isinstance(body, dict):
            return cls()
        rows = body.get("result")
        if not isinstance(rows, list):
            rows = body.get("data")
        if not isinstance(rows, list):
            rows = []
        return cls(
            rows=rows,
            row_count=body.get("row_count") or len(rows),
            execution_time_ms=body.get("execution_time_ms") or 0.0,
            cached_at=body.get("cached_at"),
        )


@runtime_checkable
class QueryExecutor(Protocol):
    """Executes a saved chart query against a database connection."""

    async def execute(
        self,
        connection_id: str,
        query: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> QueryResult:
        """Run the query; raises QueryExecutionError on failure."""
        ...
