"""
MongoDB Connector

Async-compatible MongoDB connector using pymongo.

Like the MySQL connector, the driver is synchronous and every operation
runs via asyncio.to_thread. Queries are bounded server-side with
``maxTimeMS``.

Documents are normalised before they leave the connector so that results
are JSON-serialisable: ObjectId and Decimal128 become strings, datetimes
become ISO-8601 strings, binary values become hex.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime
from typing import Any
from urllib.parse import ParseResult, unquote

from bson import Decimal128, ObjectId
from pymongo import MongoClient
from pymongo.errors import ExecutionTimeout, PyMongoError

from queryiq.connectors.base import (
    BaseConnector,
    ConnectionError,
    QueryExecutionError,
    QueryResult,
    SchemaError,
    UnsupportedOperationError,
)
from queryiq.models.database import DatabaseKind, MongoOperation, MongoQuerySpec, QuerySpec
from queryiq.models.schema import (
    EMPTY_COLLECTION,
    CollectionCount,
    CollectionListing,
    CollectionSchema,
    CollectionSummary,
    FieldSummary,
)

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "test"


def type_tag(value: Any) -> str:
    """Coarse type name for a BSON value, as shown to the model."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float, Decimal128)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, ObjectId):
        return "objectId"
    if isinstance(value, datetime):
        return "date"
    if isinstance(value, (bytes, bytearray)):
        return "binary"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__.lower()


def normalize_document(value: Any) -> Any:
    """Recursively convert BSON-specific values into JSON-friendly ones."""
    if isinstance(value, dict):
        return {str(key): normalize_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [normalize_document(item) for item in value]
    if isinstance(value, (ObjectId, Decimal128)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return value


def summarize_fields(documents: list[dict[str, Any]]) -> dict[str, FieldSummary]:
    """Observed type tags per top-level key, plus the first example value."""
    fields: dict[str, FieldSummary] = {}
    for doc in documents:
        for key, value in doc.items():
            tag = type_tag(value)
            entry = fields.get(key)
            if entry is None:
                fields[key] = FieldSummary(types=[tag], example=normalize_document(value))
            elif tag not in entry.types:
                entry.types.append(tag)
    return fields


class MongoDBConnector(BaseConnector):
    """MongoDB connector using pymongo's MongoClient."""

    kind = DatabaseKind.MONGODB

    def __init__(self, database_url: str, sample_size: int = 5, **kwargs) -> None:
        super().__init__(database_url, **kwargs)
        self.sample_size = sample_size
        self._client: MongoClient | None = None
        self._db: Any = None

    def _parse_url(self, parsed: ParseResult) -> None:
        # Seed lists (h1:27017,h2:27017) and SRV records are left to pymongo.
        self.host = parsed.netloc.rpartition("@")[2] or "localhost"
        self.port = None
        self.user = unquote(parsed.username) if parsed.username else ""
        self.password = unquote(parsed.password) if parsed.password else ""
        self.database = parsed.path.lstrip("/") if parsed.path else ""

    @property
    def display_name(self) -> str:
        return f"{self.host}/{self.database or DEFAULT_DATABASE}"

    async def connect(self) -> None:
        """Create the client and ping the server."""
        if self._connected:
            return
        try:
            self._client, self._db = await asyncio.to_thread(self._connect_sync)
            self._connected = True
        except PyMongoError as exc:
            logger.error(f"MongoDB connection failed: {exc}")
            raise ConnectionError(f"Failed to connect to MongoDB: {exc}") from exc
        except Exception as exc:
            logger.error(f"MongoDB connection failed: {exc}")
            raise ConnectionError(f"Connection error: {exc}") from exc

    async def execute(self, spec: QuerySpec, timeout: int | None = None) -> QueryResult:
        """
        Run countDocuments, find or aggregate against one collection.

        countDocuments yields a single row ``{"count": n}``.

        Raises:
            UnsupportedOperationError: For any other operation name
            QueryExecutionError: If the server rejects the operation or times out
        """
        self._require_connected()
        mongo_spec = self._require_mongo(spec)
        if mongo_spec.operation not in tuple(MongoOperation):
            raise UnsupportedOperationError(mongo_spec.operation)

        start_time = time.perf_counter()
        query_timeout = timeout or self.timeout
        try:
            rows = await asyncio.to_thread(self._execute_sync, mongo_spec, query_timeout)
        except ExecutionTimeout as exc:
            logger.error(f"MongoDB {mongo_spec.operation} timed out after {query_timeout}s")
            raise QueryExecutionError(f"Query timeout ({query_timeout}s)") from exc
        except PyMongoError as exc:
            logger.error(f"MongoDB {mongo_spec.operation} failed: {exc}")
            raise QueryExecutionError(f"Query execution failed: {exc}") from exc
        except Exception as exc:
            logger.error(f"MongoDB {mongo_spec.operation} failed: {exc}")
            raise QueryExecutionError(f"Query error: {exc}") from exc

        return QueryResult(
            rows=rows,
            row_count=len(rows),
            columns=list(rows[0].keys()) if rows else [],
            execution_time_ms=self._elapsed_ms(start_time),
        )

    async def get_schema(
        self, entity_name: str | None = None
    ) -> CollectionSchema | CollectionListing:
        """
        Sampled field types for one collection, or every collection with its count.

        An empty collection reports ``"Empty collection"`` instead of a field map.
        """
        self._require_connected()
        try:
            if entity_name:
                return await asyncio.to_thread(self._collection_schema_sync, entity_name)
            return await asyncio.to_thread(self._collection_listing_sync)
        except PyMongoError as exc:
            logger.error(f"MongoDB schema lookup failed: {exc}")
            raise SchemaError(f"Failed to read schema: {exc}") from exc
        except Exception as exc:
            logger.error(f"MongoDB schema lookup failed: {exc}")
            raise SchemaError(f"Schema error: {exc}") from exc

    async def introspect(self) -> list[CollectionSummary]:
        """Collection stats (document count, storage size) sorted by name."""
        self._require_connected()
        try:
            summaries = await asyncio.to_thread(self._introspect_sync)
        except PyMongoError as exc:
            logger.error(f"MongoDB introspection failed: {exc}")
            raise SchemaError(f"Failed to introspect database: {exc}") from exc
        except Exception as exc:
            logger.error(f"MongoDB introspection failed: {exc}")
            raise SchemaError(f"Schema introspection error: {exc}") from exc
        logger.info(f"Introspected MongoDB database: found {len(summaries)} collections")
        return summaries

    async def close(self) -> None:
        """Close the client. Safe to call multiple times."""
        client = self._client
        self._client = None
        self._db = None
        self._connected = False
        if client is None:
            return
        try:
            await asyncio.to_thread(client.close)
        except Exception as exc:
            logger.warning(f"Error closing MongoDB client: {exc}")

    def _connect_sync(self):
        client = MongoClient(
            self.database_url,
            serverSelectionTimeoutMS=self.connect_timeout * 1000,
            connectTimeoutMS=self.connect_timeout * 1000,
            **self.kwargs,
        )
        try:
            client.admin.command("ping")
        except Exception:
            client.close()
            raise
        return client, client.get_default_database(default=DEFAULT_DATABASE)

    def _execute_sync(self, spec: MongoQuerySpec, query_timeout: int) -> list[dict[str, Any]]:
        collection = self._db[spec.collection]
        max_time_ms = int(query_timeout * 1000)

        if spec.operation == MongoOperation.COUNT:
            count = collection.count_documents(spec.filter, maxTimeMS=max_time_ms)
            return [{"count": count}]

        if spec.operation == MongoOperation.FIND:
            cursor = collection.find(spec.filter, max_time_ms=max_time_ms)
            if spec.options.sort:
                cursor = cursor.sort(list(spec.options.sort.items()))
            if spec.options.skip:
                cursor = cursor.skip(spec.options.skip)
            if spec.options.limit:
                cursor = cursor.limit(spec.options.limit)
            return [normalize_document(doc) for doc in cursor]

        cursor = collection.aggregate(spec.pipeline, maxTimeMS=max_time_ms)
        return [normalize_document(doc) for doc in cursor]

    def _collection_schema_sync(self, name: str) -> CollectionSchema:
        collection = self._db[name]
        document_count = collection.count_documents({})
        if document_count == 0:
            return CollectionSchema(
                collection=name, field_types=EMPTY_COLLECTION, document_count=0
            )
        sample = list(collection.find({}).limit(self.sample_size))
        return CollectionSchema(
            collection=name,
            field_types=summarize_fields(sample),
            document_count=document_count,
            sampled_documents=len(sample),
        )

    def _collection_listing_sync(self) -> CollectionListing:
        names = sorted(self._db.list_collection_names())
        collections = [
            CollectionCount(name=name, document_count=self._db[name].count_documents({}))
            for name in names
        ]
        return CollectionListing(collections=collections, collection_count=len(collections))

    def _introspect_sync(self) -> list[CollectionSummary]:
        summaries: list[CollectionSummary] = []
        for name in sorted(self._db.list_collection_names()):
            stats = self._db.command("collStats", name)
            summaries.append(
                CollectionSummary(
                    collection=name,
                    document_count=int(stats.get("count", 0) or 0),
                    storage_size=int(stats.get("size") or stats.get("storageSize") or 0),
                )
            )
        return summaries
