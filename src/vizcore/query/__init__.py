"""Query-execution collaborator interfaces and clients."""

from vizcore.query.executor import QueryExecutor, QueryResult
from vizcore.query.http_executor import HttpQueryExecutor

__all__ = ["HttpQueryExecutor", "QueryExecutor", "QueryResult"]
