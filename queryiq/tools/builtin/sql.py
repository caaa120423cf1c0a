"""Relational tools (PostgreSQL, MySQL)."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field
from queryiq.connectors.factory import execute_query
from queryiq.models.base import to_jsonable
from queryiq.models.database import SqlQuerySpec
from queryiq.query.governor import extract_count
from queryiq.query.validator import (
    ValidationError,
    is_select,
    validate_count_query,
    validate_sql_query,
)
from queryiq.tools.base import ToolCategory, ToolContext, tool

AGGREGATION_SELECT_REASON = "Only SELECT queries allowed"


@tool(
    name="getRowCount",
    description=(
        "Get the count of rows that would be returned by a query. Use this BEFORE "
        "executing any query to check dataset size."
    ),
    category=ToolCategory.SQL,
    error_field="count",
)
async def get_row_count(
    count_query: Annotated[
        str,
        Field(description="SQL COUNT query (e.g., SELECT COUNT(*) FROM table WHERE conditions)"),
    ],
    explanation: Annotated[str, Field(description="Why you're checking the count")],
    ctx: ToolContext | None = None,
) -> dict[str, Any]:
    validate_count_query(count_query).raise_for_error()
    result = await execute_query(ctx.target, SqlQuerySpec(text=count_query), ctx.query_settings)
    summary = ctx.governor.govern_count(extract_count(result.rows))
    return {"explanation": explanation, **summary.to_payload()}


@tool(
    name="executeQuery",
    description=(
        "Execute a SQL SELECT query with pagination. Always check row count first using "
        "getRowCount. Maximum {max_rows_per_page} rows per query. Use LIMIT and OFFSET "
        "for pagination."
    ),
    category=ToolCategory.SQL,
    error_field="results",
)
async def execute_sql_query(
    query: Annotated[str, Field(description="The SQL SELECT query with LIMIT clause")],
    explanation: Annotated[str, Field(description="What this query does")],
    page: Annotated[int | None, Field(description="Page number (for offset pagination)")] = None,
    estimated_row_count: Annotated[
        int | None, Field(description="Estimated total rows from getRowCount")
    ] = None,
    ctx: ToolContext | None = None,
) -> dict[str, Any]:
    validate_sql_query(
        query, ctx.target.kind, ctx.pagination.max_rows_per_page
    ).raise_for_error()
    result = await execute_query(ctx.target, SqlQuerySpec(text=query), ctx.query_settings)
    governed = ctx.governor.govern_rows(
        result.rows,
        page=max(page or 1, 1),
        estimated_total=estimated_row_count or None,
    )
    return {"explanation": explanation, **governed.to_payload()}


@tool(
    name="executeAggregation",
    description=(
        "Execute aggregation queries (COUNT, AVG, SUM, MIN, MAX, GROUP BY) for statistical "
        "summaries. Use this instead of fetching all rows."
    ),
    category=ToolCategory.SQL,
    error_field="results",
)
async def execute_sql_aggregation(
    query: Annotated[str, Field(description="SQL aggregation query")],
    explanation: Annotated[str, Field(description="What insights this provides")],
    ctx: ToolContext | None = None,
) -> dict[str, Any]:
    if not is_select(query):
        raise ValidationError(AGGREGATION_SELECT_REASON)
    result = await execute_query(ctx.target, SqlQuerySpec(text=query), ctx.query_settings)
    return {
        "explanation": explanation,
        "results": to_jsonable(result.rows),
        "rowCount": result.row_count,
        "type": "aggregation",
    }
