"""MongoDB tools."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

from queryiq.connectors.factory import execute_query
from queryiq.models.base import to_jsonable
from queryiq.models.database import MongoQuerySpec
from queryiq.query.governor import extract_count
from queryiq.query.validator import ValidationError, validate_pipeline
from queryiq.tools.base import ToolCategory, ToolContext, tool


@tool(
    name="getDocumentCount",
    description=(
        "Get the count of documents that would be returned by a query. Use this BEFORE "
        "executing any query to check dataset size."
    ),
    category=ToolCategory.MONGO,
    error_field="count",
)
async def get_document_count(
    collection: Annotated[str, Field(description="Collection name")],
    explanation: Annotated[str, Field(description="Why you're checking the count")],
    filter: Annotated[
        dict[str, Any] | None,
        Field(description="MongoDB filter object (e.g., { status: 'active' })"),
    ] = None,
    ctx: ToolContext | None = None,
) -> dict[str, Any]:
    spec = MongoQuerySpec.count(collection, filter)
    result = await execute_query(ctx.target, spec, ctx.query_settings)
    summary = ctx.governor.govern_count(extract_count(result.rows))
    return {"explanation": explanation, **summary.to_payload()}


@tool(
    name="findDocuments",
    description=(
        "Find documents in a MongoDB collection with pagination. Always check document "
        "count first using getDocumentCount. Maximum {max_rows_per_page} documents per query."
    ),
    category=ToolCategory.MONGO,
    error_field="results",
)
async def find_documents(
    collection: Annotated[str, Field(description="Collection name")],
    explanation: Annotated[str, Field(description="What this query does")],
    filter: Annotated[dict[str, Any] | None, Field(description="MongoDB filter object")] = None,
    sort: Annotated[
        dict[str, int] | None,
        Field(description="Sort specification (e.g., { createdAt: -1 })"),
    ] = None,
    limit: Annotated[int | None, Field(description="Maximum documents to return")] = None,
    skip: Annotated[int | None, Field(description="Number of documents to skip")] = None,
    estimated_count: Annotated[
        int | None, Field(description="Estimated total documents from getDocumentCount")
    ] = None,
    ctx: ToolContext | None = None,
) -> dict[str, Any]:
    max_rows = ctx.pagination.max_rows_per_page
    if limit is None:
        limit = max_rows
    elif not 1 <= limit <= max_rows:
        raise ValidationError(f"limit must be between 1 and {max_rows}")
    offset = skip or 0
    if offset < 0:
        raise ValidationError("skip must not be negative")

    spec = MongoQuerySpec.find(collection, filter, limit=limit, skip=offset, sort=sort)
    result = await execute_query(ctx.target, spec, ctx.query_settings)
    governed = ctx.governor.govern_rows(
        result.rows,
        page=offset // limit + 1,
        estimated_total=estimated_count or None,
        page_size=limit,
        offset=offset,
    )
    payload = governed.to_payload()
    payload["documentCount"] = payload.pop("rowCount")
    return {"explanation": explanation, **payload}


@tool(
    name="executeAggregation",
    description=(
        "Execute MongoDB aggregation pipeline for statistical summaries, grouping, and "
        "complex queries. Use this instead of fetching all documents."
    ),
    category=ToolCategory.MONGO,
    error_field="results",
)
async def execute_mongo_aggregation(
    collection: Annotated[str, Field(description="Collection name")],
    pipeline: Annotated[
        list[dict[str, Any]],
        Field(
            description=(
                "MongoDB aggregation pipeline "
                "(e.g., [{ $match: {...} }, { $group: {...} }])"
            )
        ),
    ],
    explanation: Annotated[str, Field(description="What insights this provides")],
    ctx: ToolContext | None = None,
) -> dict[str, Any]:
    validate_pipeline(pipeline).raise_for_error()
    spec = MongoQuerySpec.aggregate(collection, pipeline)
    result = await execute_query(ctx.target, spec, ctx.query_settings)
    return {
        "explanation": explanation,
        "results": to_jsonable(result.rows),
        "documentCount": result.row_count,
        "type": "aggregation",
    }
