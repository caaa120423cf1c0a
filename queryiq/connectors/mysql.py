"""
MySQL Connector

Async-compatible MySQL connector using mysql-connector-python.

The underlying driver is synchronous, so every operation runs in a worker
thread via asyncio.to_thread. A worker thread cannot be cancelled; the
server-side ``max_execution_time`` is what bounds a runaway SELECT.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import mysql.connector
from mysql.connector import Error as MySQLError

from queryiq.connectors.base import (
    BaseConnector,
    ConnectionError,
    QueryExecutionError,
    QueryResult,
    SchemaError,
)
from queryiq.models.database import DatabaseKind, QuerySpec
from queryiq.models.schema import RelationalSchema, TableColumn, TableSummary

logger = logging.getLogger(__name__)

# ER_QUERY_TIMEOUT: maximum statement execution time exceeded
_QUERY_TIMEOUT_ERRNO = 3024

_COLUMNS_QUERY = """
    SELECT
        table_name AS table_name,
        column_name AS column_name,
        data_type AS data_type,
        is_nullable AS is_nullable,
        column_default AS column_default
    FROM information_schema.columns
    WHERE table_schema = DATABASE()
"""


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


class MySQLConnector(BaseConnector):
    """MySQL database connector using mysql-connector-python."""

    kind = DatabaseKind.MYSQL

    def __init__(self, database_url: str, **kwargs) -> None:
        super().__init__(database_url, **kwargs)
        self._connection: Any = None

    async def connect(self) -> None:
        """Open one connection and check it answers."""
        if self._connected:
            return
        try:
            self._connection = await asyncio.to_thread(self._connect_sync)
            self._connected = True
        except MySQLError as exc:
            logger.error(f"MySQL connection failed: {exc}")
            raise ConnectionError(f"Failed to connect to MySQL: {exc}") from exc
        except Exception as exc:
            logger.error(f"MySQL connection failed: {exc}")
            raise ConnectionError(f"Connection error: {exc}") from exc

    async def execute(self, spec: QuerySpec, timeout: int | None = None) -> QueryResult:
        """Execute SQL in a read-only transaction and return rows."""
        self._require_connected()
        query = self._require_sql(spec)

        start_time = time.perf_counter()
        query_timeout = timeout or self.timeout
        try:
            rows, columns = await asyncio.to_thread(self._execute_sync, query, query_timeout)
        except MySQLError as exc:
            if getattr(exc, "errno", None) == _QUERY_TIMEOUT_ERRNO:
                logger.error(f"MySQL query timed out after {query_timeout}s")
                raise QueryExecutionError(f"Query timeout ({query_timeout}s)") from exc
            logger.error(f"MySQL query failed: {exc}")
            raise QueryExecutionError(f"Query execution failed: {exc}") from exc
        except Exception as exc:
            logger.error(f"MySQL query failed: {exc}")
            raise QueryExecutionError(f"Query error: {exc}") from exc

        return QueryResult(
            rows=rows,
            row_count=len(rows),
            columns=columns,
            execution_time_ms=self._elapsed_ms(start_time),
        )

    async def get_schema(self, entity_name: str | None = None) -> RelationalSchema:
        """Column listing for one table, or for the whole current database."""
        self._require_connected()
        try:
            rows = await asyncio.to_thread(self._get_schema_sync, entity_name)
        except MySQLError as exc:
            logger.error(f"MySQL schema lookup failed: {exc}")
            raise SchemaError(f"Failed to read schema: {exc}") from exc
        except Exception as exc:
            logger.error(f"MySQL schema lookup failed: {exc}")
            raise SchemaError(f"Schema error: {exc}") from exc
        return RelationalSchema.from_column_rows(rows)

    async def introspect(self) -> list[TableSummary]:
        """Tables via SHOW TABLES, columns via SHOW COLUMNS."""
        self._require_connected()
        try:
            summaries = await asyncio.to_thread(self._introspect_sync)
        except MySQLError as exc:
            logger.error(f"MySQL schema introspection failed: {exc}")
            raise SchemaError(f"Failed to introspect schema: {exc}") from exc
        except Exception as exc:
            logger.error(f"MySQL schema introspection failed: {exc}")
            raise SchemaError(f"Schema error: {exc}") from exc
        logger.info(f"Introspected MySQL schema: found {len(summaries)} tables")
        return summaries

    async def close(self) -> None:
        """Close the connection. Safe to call multiple times."""
        connection = self._connection
        self._connection = None
        self._connected = False
        if connection is None:
            return
        try:
            await asyncio.to_thread(connection.close)
        except Exception as exc:
            logger.warning(f"Error closing MySQL connection: {exc}")

    def _connection_kwargs(self) -> dict[str, Any]:
        kwargs = {
            "host": self.host,
            "port": self.port or 3306,
            "database": self.database or None,
            "user": self.user or "root",
            "password": self.password,
            "autocommit": True,
            "connection_timeout": self.connect_timeout,
        }
        kwargs.update(self.kwargs)
        return kwargs

    def _connect_sync(self):
        conn = mysql.connector.connect(**self._connection_kwargs())
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT VERSION()")
            cursor.fetchone()
        except Exception:
            cursor.close()
            conn.close()
            raise
        cursor.close()
        return conn

    def _execute_sync(
        self, query: str, query_timeout: int
    ) -> tuple[list[dict[str, Any]], list[str]]:
        conn = self._connection
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(f"SET SESSION max_execution_time = {int(query_timeout * 1000)}")
            conn.start_transaction(readonly=True)
            try:
                cursor.execute(query)
                if cursor.with_rows:
                    rows = cursor.fetchall()
                    columns = (
                        list(rows[0].keys()) if rows else [col[0] for col in cursor.description]
                    )
                else:
                    rows, columns = [], []
            finally:
                conn.rollback()
            return rows, columns
        finally:
            cursor.close()

    def _get_schema_sync(self, entity_name: str | None) -> list[dict[str, Any]]:
        cursor = self._connection.cursor(dictionary=True)
        try:
            if entity_name:
                cursor.execute(
                    _COLUMNS_QUERY + " AND table_name = %s ORDER BY ordinal_position",
                    (entity_name,),
                )
            else:
                cursor.execute(
                    _COLUMNS_QUERY + " ORDER BY table_name, ordinal_position LIMIT %s",
                    (self.schema_table_limit,),
                )
            return cursor.fetchall()
        finally:
            cursor.close()

    def _introspect_sync(self) -> list[TableSummary]:
        cursor = self._connection.cursor(dictionary=True)
        try:
            cursor.execute("SHOW TABLES")
            table_names = [_text(next(iter(row.values()))) for row in cursor.fetchall()]

            summaries: list[TableSummary] = []
            for table_name in table_names:
                cursor.execute(f"SHOW COLUMNS FROM {_quote_identifier(table_name)}")
                summaries.append(
                    TableSummary(
                        table=table_name,
                        columns=[
                            TableColumn(name=_text(col["Field"]), type=_text(col["Type"]))
                            for col in cursor.fetchall()
                        ],
                    )
                )
            return summaries
        finally:
            cursor.close()
