"""
Database Connectors Module

Provides async, per-request connectors for the user's external database.

Available Connectors:
    - BaseConnector: Abstract base class
    - PostgresConnector: PostgreSQL connector (asyncpg)
    - MySQLConnector: MySQL connector (mysql-connector-python)
    - MongoDBConnector: MongoDB connector (pymongo)

Usage:
    from queryiq.connectors import execute_query
    from queryiq.models import DatabaseTarget, SqlQuerySpec

    target = DatabaseTarget(connection_secret="postgresql://u:p@host/db", kind="postgres")
    result = await execute_query(target, SqlQuerySpec(text="SELECT * FROM users LIMIT 50"))
"""

from queryiq.connectors.base import (
    BaseConnector,
    ConnectionError,
    ConnectorError,
    QueryExecutionError,
    QueryResult,
    SchemaError,
    UnsupportedOperationError,
)
from queryiq.connectors.factory import (
    create_connector,
    execute_query,
    get_schema,
)
from queryiq.connectors.mongodb import MongoDBConnector
from queryiq.connectors.mysql import MySQLConnector
from queryiq.connectors.postgres import PostgresConnector

__all__ = [
    "BaseConnector",
    "PostgresConnector",
    "MySQLConnector",
    "MongoDBConnector",
    "create_connector",
    "execute_query",
    "get_schema",
    "QueryResult",
    "ConnectorError",
    "ConnectionError",
    "QueryExecutionError",
    "SchemaError",
    "UnsupportedOperationError",
]
