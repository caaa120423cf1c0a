"""Database introspection."""

from queryiq.introspection.engine import (
    DatabaseConnectionError,
    DatabaseIntrospectionError,
    IntrospectionError,
    UnsupportedDatabaseError,
    introspect,
    introspect_database,
)

__all__ = [
    "DatabaseConnectionError",
    "DatabaseIntrospectionError",
    "IntrospectionError",
    "UnsupportedDatabaseError",
    "introspect",
    "introspect_database",
]
