"""
Introspection engine.

One-shot structural analysis of an external database, run when a project
is created or its summary is refreshed. Heavier than the ``getSchema``
tool: relational backends list every table and then fetch each table's
columns; MongoDB lists every collection with its stats.
"""

from __future__ import annotations

import logging

from queryiq.config import QuerySettings
from queryiq.connectors.base import ConnectorError, IntrospectionSummary
from queryiq.connectors.factory import create_connector
from queryiq.models.database import (
    DatabaseKind,
    DatabaseTarget,
    UnsupportedDatabaseError,
    normalize_database_kind,
)
from queryiq.models.schema import DatabaseSummary

logger = logging.getLogger(__name__)


class IntrospectionError(Exception):
    """Base class for introspection failures."""


class DatabaseConnectionError(IntrospectionError):
    """Could not establish the connection (network, auth, bad URL)."""

    def __init__(self, db_label: str, original: Exception) -> None:
        super().__init__(f"Failed to connect to {db_label} database: {original}")


class DatabaseIntrospectionError(IntrospectionError):
    """Connected, but a catalog or stats query failed."""

    def __init__(self, db_label: str, original: Exception) -> None:
        super().__init__(f"Failed to introspect {db_label} database: {original}")


async def introspect(
    target: DatabaseTarget,
    settings: QuerySettings | None = None,
) -> IntrospectionSummary:
    """
    Introspect a database target.

    Raises:
        DatabaseConnectionError: If the connection cannot be established
        DatabaseIntrospectionError: If a catalog/stats query fails
    """
    label = target.kind.label
    try:
        connector = create_connector(target, settings)
        await connector.connect()
    except ConnectorError as exc:
        raise DatabaseConnectionError(label, exc) from exc

    try:
        return await connector.introspect()
    except ConnectorError as exc:
        raise DatabaseIntrospectionError(label, exc) from exc
    finally:
        await connector.close()


async def introspect_database(
    connection_string: str,
    db_type: str | DatabaseKind,
    settings: QuerySettings | None = None,
) -> DatabaseSummary:
    """
    Normalise ``db_type``, introspect, and wrap the result with a timestamp.

    Raises:
        UnsupportedDatabaseError: If ``db_type`` is not a supported kind
        DatabaseConnectionError / DatabaseIntrospectionError: see ``introspect``
    """
    kind = normalize_database_kind(db_type)
    target = DatabaseTarget(connection_secret=connection_string, kind=kind)

    logger.info(f"Starting database introspection for {kind.value}")
    summary = await introspect(target, settings)
    logger.info(
        "Database introspection completed",
        extra={"db_kind": kind.value, "entries": len(summary)},
    )
    return DatabaseSummary(summary=summary, db_type=kind.value)


__all__ = [
    "IntrospectionError",
    "DatabaseConnectionError",
    "DatabaseIntrospectionError",
    "UnsupportedDatabaseError",
    "introspect",
    "introspect_database",
]
