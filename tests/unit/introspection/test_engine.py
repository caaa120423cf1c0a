"""Tests for the introspection engine."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from queryiq.connectors.base import ConnectionError, SchemaError
from queryiq.introspection.engine import (
    DatabaseConnectionError,
    DatabaseIntrospectionError,
    introspect,
    introspect_database,
)
from queryiq.models.database import UnsupportedDatabaseError
from queryiq.models.schema import CollectionSummary, TableColumn, TableSummary


@pytest.fixture
def connector():
    connector = AsyncMock()
    connector.introspect.return_value = [
        TableSummary(table="users", columns=[TableColumn(name="id", type="integer")]),
    ]
    with patch("queryiq.introspection.engine.create_connector", return_value=connector):
        yield connector


@pytest.mark.asyncio
async def test_introspect_closes_connector(connector, postgres_target):
    summary = await introspect(postgres_target)

    assert summary[0].table == "users"
    connector.connect.assert_awaited_once()
    connector.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_connection_failure(connector, mysql_target):
    connector.connect.side_effect = ConnectionError("Access denied")

    with pytest.raises(DatabaseConnectionError, match="Failed to connect to MySQL database: Access denied"):
        await introspect(mysql_target)

    connector.introspect.assert_not_awaited()


@pytest.mark.asyncio
async def test_catalog_failure_still_closes(connector, postgres_target):
    connector.introspect.side_effect = SchemaError("permission denied")

    with pytest.raises(DatabaseIntrospectionError, match="Failed to introspect PostgreSQL database"):
        await introspect(postgres_target)

    connector.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_introspect_database_wraps_summary(connector):
    summary = await introspect_database("postgresql://u:p@localhost/app", " Postgres ")

    assert summary.db_type == "postgresql"
    assert summary.summary[0].table == "users"
    assert summary.introspected_at is not None


@pytest.mark.asyncio
async def test_introspect_database_mongo(connector):
    connector.introspect.return_value = [
        CollectionSummary(collection="events", document_count=3, storage_size=20)
    ]

    summary = await introspect_database("mongodb://localhost/app", "mongodb")

    assert summary.db_type == "mongodb"
    assert summary.summary[0].collection == "events"


@pytest.mark.asyncio
async def test_unsupported_type(connector):
    with pytest.raises(UnsupportedDatabaseError):
        await introspect_database("sqlite:///x.db", "sqlite")


@pytest.mark.asyncio
async def test_malformed_port_is_a_connection_error():
    with pytest.raises(DatabaseConnectionError, match="Invalid connection URL"):
        await introspect_database("postgresql://u:p@db.internal:54x2/app", "postgres")


@pytest.mark.asyncio
async def test_replica_set_uri_reaches_pymongo():
    url = "mongodb://u:p@h1:27017,h2:27017,h3:27017/shop?replicaSet=rs0"
    db = MagicMock()
    db.list_collection_names.return_value = ["events"]
    db.command.return_value = {"count": 3, "size": 20}
    client = MagicMock()
    client.get_default_database.return_value = db

    with patch("queryiq.connectors.mongodb.MongoClient", return_value=client) as client_cls:
        summary = await introspect_database(url, "mongodb")

    assert client_cls.call_args.args[0] == url
    assert summary.summary[0].collection == "events"
    assert summary.summary[0].document_count == 3
    client.close.assert_called_once()
