"""
Database target and query models.

A DatabaseTarget pairs a decrypted connection string with one of the three
supported backend kinds. QuerySpec is the discriminated union handed to a
connector: free SQL text for relational kinds, a structured operation for
MongoDB.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator

SUPPORTED_DATABASE_TYPES = ("postgres", "postgresql", "mysql", "mongodb")


class UnsupportedDatabaseError(ValueError):
    """Raised for a database type string outside the supported set."""

    def __init__(self, db_type: str) -> None:
        self.db_type = db_type
        super().__init__(
            f"Unsupported database type: {db_type}. "
            f"Supported types: {', '.join(SUPPORTED_DATABASE_TYPES)}"
        )


class DatabaseKind(StrEnum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"

    @property
    def is_relational(self) -> bool:
        return self is not DatabaseKind.MONGODB

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_LABELS = {
    DatabaseKind.POSTGRESQL: "PostgreSQL",
    DatabaseKind.MYSQL: "MySQL",
    DatabaseKind.MONGODB: "MongoDB",
}

_KIND_ALIASES = {
    "postgres": DatabaseKind.POSTGRESQL,
    "postgresql": DatabaseKind.POSTGRESQL,
    "mysql": DatabaseKind.MYSQL,
    "mongodb": DatabaseKind.MONGODB,
}


def normalize_database_kind(db_type: str | DatabaseKind) -> DatabaseKind:
    """Map a user-supplied type string onto DatabaseKind, case-insensitively."""
    if isinstance(db_type, DatabaseKind):
        return db_type
    kind = _KIND_ALIASES.get(str(db_type).strip().lower())
    if kind is None:
        raise UnsupportedDatabaseError(str(db_type))
    return kind


class DatabaseTarget(BaseModel):
    """Live database a single request talks to. Never persisted."""

    connection_secret: SecretStr = Field(..., description="Decrypted connection string")
    kind: DatabaseKind = Field(..., description="Backend kind")

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: Any) -> DatabaseKind:
        return normalize_database_kind(v)

    @property
    def url(self) -> str:
        return self.connection_secret.get_secret_value()


class SqlQuerySpec(BaseModel):
    """Relational query: raw SQL text."""

    kind: Literal["sql"] = "sql"
    text: str = Field(..., min_length=1)


class MongoOperation(StrEnum):
    COUNT = "countDocuments"
    FIND = "find"
    AGGREGATE = "aggregate"


class MongoFindOptions(BaseModel):
    limit: int | None = Field(None, ge=0)
    skip: int = Field(default=0, ge=0)
    sort: dict[str, int] | None = None


class MongoQuerySpec(BaseModel):
    """
    Document query: a collection plus one of the supported operations.

    ``operation`` is kept as a plain string so an unrecognised name reaches
    the connector and fails with UnsupportedOperationError there.
    """

    kind: Literal["mongo"] = "mongo"
    collection: str
    operation: str
    filter: dict[str, Any] = Field(default_factory=dict)
    options: MongoFindOptions = Field(default_factory=MongoFindOptions)
    pipeline: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("collection")
    @classmethod
    def validate_collection(cls, v: str) -> str:
        """Enforce MongoDB collection naming rules."""
        value = v.strip()
        if not value:
            raise ValueError("Collection name must not be empty")
        if "$" in value or "\x00" in value:
            raise ValueError(f"Invalid collection name: {v}")
        if value.startswith("system."):
            raise ValueError(f"System collections are not queryable: {v}")
        return value

    @classmethod
    def count(cls, collection: str, filter: dict[str, Any] | None = None) -> "MongoQuerySpec":
        return cls(collection=collection, operation=MongoOperation.COUNT, filter=filter or {})

    @classmethod
    def find(
        cls,
        collection: str,
        filter: dict[str, Any] | None = None,
        *,
        limit: int | None = None,
        skip: int = 0,
        sort: dict[str, int] | None = None,
    ) -> "MongoQuerySpec":
        return cls(
            collection=collection,
            operation=MongoOperation.FIND,
            filter=filter or {},
            options=MongoFindOptions(limit=limit, skip=skip, sort=sort),
        )

    @classmethod
    def aggregate(cls, collection: str, pipeline: list[dict[str, Any]]) -> "MongoQuerySpec":
        return cls(collection=collection, operation=MongoOperation.AGGREGATE, pipeline=pipeline)


QuerySpec = Annotated[SqlQuerySpec | MongoQuerySpec, Field(discriminator="kind")]
