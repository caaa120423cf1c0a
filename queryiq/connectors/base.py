"""
Base Database Connector

Abstract base class for all database connectors. Provides a consistent
async interface for connecting to, querying, and introspecting the user's
external database.

All connectors must implement:
- connect(): Open a single connection/client for this request
- execute(): Run one QuerySpec with a statement timeout
- get_schema(): Lightweight schema lookup used mid-conversation
- introspect(): Heavier structural summary used at project creation
- close(): Release the connection (safe to call more than once)

Connectors are scoped: one instance per tool invocation, opened with
``async with`` and closed on every exit path. There is no pooling.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar
from urllib.parse import ParseResult, unquote, urlparse

from pydantic import BaseModel, Field

from queryiq.models.database import DatabaseKind, MongoQuerySpec, QuerySpec, SqlQuerySpec
from queryiq.models.schema import (
    CollectionListing,
    CollectionSchema,
    CollectionSummary,
    RelationalSchema,
    TableSummary,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Data Models
# ============================================================================


class QueryResult(BaseModel):
    """Result from query execution."""

    rows: list[dict[str, Any]] = Field(..., description="Query result rows or documents")
    row_count: int = Field(..., description="Number of rows returned")
    columns: list[str] = Field(default_factory=list, description="Column names")
    execution_time_ms: float = Field(..., description="Query execution time in ms")


SchemaLookup = RelationalSchema | CollectionSchema | CollectionListing
IntrospectionSummary = list[TableSummary] | list[CollectionSummary]


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class ConnectionError(ConnectorError):
    """Error establishing or managing database connection."""

    pass


class QueryExecutionError(ConnectorError):
    """The backend rejected the query (syntax, permissions, timeout)."""

    pass


class SchemaError(ConnectorError):
    """Error reading catalog or collection statistics."""

    pass


class UnsupportedOperationError(ConnectorError):
    """Unrecognised MongoDB operation name."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Unsupported MongoDB operation: {operation}")


# ============================================================================
# Base Connector
# ============================================================================


class BaseConnector(ABC):
    """
    Abstract base class for database connectors.

    Usage:
        async with PostgresConnector("postgresql://u:p@host/db") as connector:
            result = await connector.execute(SqlQuerySpec(text="SELECT 1 LIMIT 1"))
            schema = await connector.get_schema("users")
    """

    kind: ClassVar[DatabaseKind]

    def __init__(
        self,
        database_url: str,
        timeout: int = 30,
        connect_timeout: int = 10,
        schema_table_limit: int = 100,
        **kwargs,
    ):
        """
        Initialize connector.

        Args:
            database_url: Connection string (never logged)
            timeout: Statement timeout in seconds
            connect_timeout: Connection establishment timeout in seconds
            schema_table_limit: Row cap when listing every column of a schema
            **kwargs: Additional driver-specific parameters
        """
        self.database_url = database_url
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.schema_table_limit = schema_table_limit
        self.kwargs = kwargs

        self._parse_url(urlparse(database_url))

        self._connected = False

        logger.debug(f"Initialized {self.__class__.__name__} for {self.display_name}")

    def _parse_url(self, parsed: ParseResult) -> None:
        """
        Fill host, port, user, password and database from the URL.

        Raises:
            ConnectionError: If the port is not an integer
        """
        try:
            self.port = parsed.port
        except ValueError as exc:
            raise ConnectionError(f"Invalid connection URL: {exc}") from exc
        self.host = parsed.hostname or "localhost"
        self.user = unquote(parsed.username) if parsed.username else ""
        self.password = unquote(parsed.password) if parsed.password else ""
        self.database = parsed.path.lstrip("/") if parsed.path else ""

    @property
    def display_name(self) -> str:
        """Credential-free description for logs."""
        port = f":{self.port}" if self.port else ""
        return f"{self.user}@{self.host}{port}/{self.database}"

    @abstractmethod
    async def connect(self) -> None:
        """
        Open the connection.

        Raises:
            ConnectionError: If connection fails
        """
        pass

    @abstractmethod
    async def execute(self, spec: QuerySpec, timeout: int | None = None) -> QueryResult:
        """
        Execute a single query.

        Args:
            spec: SqlQuerySpec for relational kinds, MongoQuerySpec for MongoDB
            timeout: Statement timeout in seconds (overrides default)

        Raises:
            QueryExecutionError: If the backend rejects the query or times out
            ConnectionError: If not connected
        """
        pass

    @abstractmethod
    async def get_schema(self, entity_name: str | None = None) -> SchemaLookup:
        """
        Look up schema for one table/collection or the whole database.

        Raises:
            SchemaError: If the catalog query fails
        """
        pass

    @abstractmethod
    async def introspect(self) -> IntrospectionSummary:
        """
        Produce the structural summary stored on a project.

        Raises:
            SchemaError: If a catalog/stats query fails
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Idempotent; failures are logged, not raised."""
        pass

    @property
    def is_connected(self) -> bool:
        """Check if connector is connected."""
        return self._connected

    def _require_connected(self) -> None:
        if not self._connected:
            raise ConnectionError("Not connected to database. Call connect() first.")

    def _require_sql(self, spec: QuerySpec) -> str:
        if not isinstance(spec, SqlQuerySpec):
            raise QueryExecutionError(
                f"{self.kind.label} connector expects a SQL query, got {type(spec).__name__}"
            )
        return spec.text

    def _require_mongo(self, spec: QuerySpec) -> MongoQuerySpec:
        if not isinstance(spec, MongoQuerySpec):
            raise QueryExecutionError(
                f"{self.kind.label} connector expects a MongoDB query, got {type(spec).__name__}"
            )
        return spec

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

    def __repr__(self) -> str:
        """String representation."""
        status = "connected" if self._connected else "disconnected"
        return f"<{self.__class__.__name__} {self.display_name} ({status})>"
