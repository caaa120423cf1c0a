"""Tools shared by every database kind."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

from queryiq.connectors.factory import get_schema as lookup_schema
from queryiq.tools.base import ToolCategory, ToolContext, tool


@tool(
    name="getSchema",
    description=(
        "Get database schema information. Use this to understand table/collection "
        "structure before writing queries."
    ),
    category=ToolCategory.COMMON,
)
async def get_schema(
    table_name: Annotated[
        str | None,
        Field(description="Specific table/collection name, or empty for all tables/collections"),
    ] = None,
    ctx: ToolContext | None = None,
) -> dict[str, Any]:
    schema = await lookup_schema(ctx.target, (table_name or "").strip() or None, ctx.query_settings)
    return schema.to_payload()


@tool(
    name="askForConfirmation",
    description=(
        "Ask user for confirmation before executing queries that will return many rows "
        "or might be slow. Use when estimated row count > {max_rows_before_export}."
    ),
    category=ToolCategory.COMMON,
    has_execute=False,
)
def ask_for_confirmation(
    message: Annotated[str, Field(description="Confirmation message")],
    query_preview: Annotated[str, Field(description="Query to be executed")],
    estimated_rows: Annotated[int, Field(description="Estimated number of rows")],
    alternatives: Annotated[
        list[str] | None,
        Field(description="Alternative approaches (e.g., export, aggregation)"),
    ] = None,
    ctx: ToolContext | None = None,
) -> None:
    """Answered by the user with ``{"confirmed": true | false}``."""


@tool(
    name="generateExcel",
    description=(
        "Generate Excel file from query results. Use this when the row count is above "
        "{max_rows_before_export}, when the user explicitly asks to download or export "
        "data, or when results are too large to display in chat."
    ),
    category=ToolCategory.COMMON,
    has_execute=False,
)
def generate_excel(
    query: Annotated[str, Field(description="Query to export")],
    filename: Annotated[str, Field(description="Excel filename")],
    message: Annotated[
        str,
        Field(description="Message explaining what data will be exported and how many rows"),
    ],
    sheet_name: Annotated[str | None, Field(description="Sheet name")] = None,
    ctx: ToolContext | None = None,
) -> None:
    """Answered by the client, which runs the export query and writes the workbook."""
