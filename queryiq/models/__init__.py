"""Data models shared across connectors, tools and the API."""

from queryiq.models.base import CamelModel
from queryiq.models.database import (
    SUPPORTED_DATABASE_TYPES,
    DatabaseKind,
    DatabaseTarget,
    MongoFindOptions,
    MongoOperation,
    MongoQuerySpec,
    QuerySpec,
    SqlQuerySpec,
    UnsupportedDatabaseError,
    normalize_database_kind,
)
from queryiq.models.results import (
    CountSummary,
    ExportResult,
    Pagination,
    PaginationConfig,
    RowsPage,
)
from queryiq.models.schema import (
    CollectionCount,
    CollectionListing,
    CollectionSchema,
    CollectionSummary,
    ColumnInfo,
    DatabaseSummary,
    FieldSummary,
    RelationalSchema,
    TableColumn,
    TableSummary,
)

__all__ = [
    "CamelModel",
    "SUPPORTED_DATABASE_TYPES",
    "DatabaseKind",
    "DatabaseTarget",
    "MongoFindOptions",
    "MongoOperation",
    "MongoQuerySpec",
    "QuerySpec",
    "SqlQuerySpec",
    "UnsupportedDatabaseError",
    "normalize_database_kind",
    "CountSummary",
    "ExportResult",
    "Pagination",
    "PaginationConfig",
    "RowsPage",
    "CollectionCount",
    "CollectionListing",
    "CollectionSchema",
    "CollectionSummary",
    "ColumnInfo",
    "DatabaseSummary",
    "FieldSummary",
    "RelationalSchema",
    "TableColumn",
    "TableSummary",
]
