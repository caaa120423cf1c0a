"""
Schema summary models.

Two families:
- Tool-level summaries returned by the ``getSchema`` tool mid-conversation
  (columns with nullability/defaults, sampled Mongo field types).
- Introspection summaries produced once at project creation and stored on
  the project (table/column names and types, collection stats).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from queryiq.models.base import CamelModel

EMPTY_COLLECTION = "Empty collection"


class ColumnInfo(CamelModel):
    """Column metadata from the catalog."""

    name: str
    type: str
    nullable: bool
    default: str | None = None


class RelationalSchema(CamelModel):
    """Ordered table -> columns mapping."""

    tables: list[str] = Field(default_factory=list)
    columns: dict[str, list[ColumnInfo]] = Field(default_factory=dict)
    table_count: int = 0

    @classmethod
    def from_column_rows(cls, rows: list[dict[str, Any]]) -> "RelationalSchema":
        """Group flat catalog rows (one per column) by table, keeping order."""
        grouped: dict[str, list[ColumnInfo]] = {}
        for row in rows:
            table_name = str(row["table_name"])
            default = row.get("column_default")
            grouped.setdefault(table_name, []).append(
                ColumnInfo(
                    name=str(row["column_name"]),
                    type=str(row["data_type"]),
                    nullable=str(row["is_nullable"]).upper() == "YES",
                    default=str(default) if default is not None else None,
                )
            )
        return cls(tables=list(grouped), columns=grouped, table_count=len(grouped))


class FieldSummary(CamelModel):
    types: list[str]
    example: Any = None


class CollectionSchema(CamelModel):
    """Field types inferred from a small document sample."""

    collection: str
    field_types: dict[str, FieldSummary] | str = Field(..., alias="schema")
    document_count: int
    sampled_documents: int = 0

    @property
    def is_empty(self) -> bool:
        return self.field_types == EMPTY_COLLECTION


class CollectionCount(CamelModel):
    name: str
    document_count: int


class CollectionListing(CamelModel):
    collections: list[CollectionCount] = Field(default_factory=list)
    collection_count: int = 0


class TableColumn(BaseModel):
    name: str
    type: str


class TableSummary(BaseModel):
    table: str
    columns: list[TableColumn] = Field(default_factory=list)


class CollectionSummary(CamelModel):
    collection: str
    document_count: int = 0
    storage_size: int = 0


class DatabaseSummary(CamelModel):
    """Introspection result persisted on a project."""

    summary: list[TableSummary] | list[CollectionSummary]
    introspected_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    db_type: str

    def render_for_prompt(self) -> str:
        """Compact text listing used in the system prompt."""
        lines: list[str] = []
        for entry in self.summary:
            if isinstance(entry, TableSummary):
                columns = ", ".join(f"{col.name} ({col.type})" for col in entry.columns)
                lines.append(f"- {entry.table}: {columns}")
            else:
                lines.append(
                    f"- {entry.collection}: {entry.document_count} documents, "
                    f"{entry.storage_size} bytes"
                )
        return "\n".join(lines) if lines else "No tables or collections found."
