"""Connector factory and per-request query helpers."""

from __future__ import annotations

import logging

from queryiq.config import QuerySettings
from queryiq.connectors.base import BaseConnector, QueryResult, SchemaLookup
from queryiq.connectors.mongodb import MongoDBConnector
from queryiq.connectors.mysql import MySQLConnector
from queryiq.connectors.postgres import PostgresConnector
from queryiq.models.database import DatabaseKind, DatabaseTarget, QuerySpec, UnsupportedDatabaseError

logger = logging.getLogger(__name__)

_CONNECTORS: dict[DatabaseKind, type[BaseConnector]] = {
    DatabaseKind.POSTGRESQL: PostgresConnector,
    DatabaseKind.MYSQL: MySQLConnector,
    DatabaseKind.MONGODB: MongoDBConnector,
}


def create_connector(
    target: DatabaseTarget,
    settings: QuerySettings | None = None,
    *,
    timeout: int | None = None,
) -> BaseConnector:
    """
    Create a typed, not-yet-connected connector for a database target.

    Raises:
        ConnectionError: If the connection URL cannot be parsed
    """
    settings = settings or QuerySettings()
    connector_cls = _CONNECTORS.get(target.kind)
    if connector_cls is None:
        raise UnsupportedDatabaseError(str(target.kind))

    kwargs = {
        "timeout": timeout or settings.statement_timeout_seconds,
        "connect_timeout": settings.connect_timeout_seconds,
        "schema_table_limit": settings.schema_table_limit,
    }
    if target.kind is DatabaseKind.MONGODB:
        kwargs["sample_size"] = settings.mongo_sample_size
    return connector_cls(target.url, **kwargs)


async def execute_query(
    target: DatabaseTarget,
    spec: QuerySpec,
    settings: QuerySettings | None = None,
    *,
    timeout: int | None = None,
) -> QueryResult:
    """
    Open a connection, run one query, and close the connection.

    The connection is released on every exit path, including errors and
    cancellation.
    """
    connector = create_connector(target, settings, timeout=timeout)
    async with connector:
        return await connector.execute(spec, timeout=timeout)


async def get_schema(
    target: DatabaseTarget,
    entity_name: str | None = None,
    settings: QuerySettings | None = None,
) -> SchemaLookup:
    """Scoped schema lookup for one table/collection or the whole database."""
    connector = create_connector(target, settings)
    async with connector:
        return await connector.get_schema(entity_name)

