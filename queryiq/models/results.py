"""
Result governance models.

Shapes returned by the result governor and the export path. Field names
serialize to camelCase because these payloads are read by the model and by
the chat client.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from queryiq.models.base import CamelModel


class PaginationConfig(BaseModel):
    """Immutable result-size thresholds. Built once from settings."""

    model_config = ConfigDict(frozen=True)

    max_rows_per_page: int = Field(default=50, gt=0)
    max_rows_before_export: int = Field(default=100, gt=0)
    max_tokens_for_results: int = Field(default=4000, gt=0)
    truncated_rows: int = Field(default=20, gt=0)


class Pagination(CamelModel):
    current_page: int = Field(..., ge=1)
    has_more: bool
    total_estimated: int | None = None


class CountSummary(CamelModel):
    """Row/document count plus the display-vs-export recommendation."""

    count: int
    should_paginate: bool
    should_export: bool
    recommendation: str


class RowsPage(CamelModel):
    """A token-budgeted page of rows or documents."""

    results: list[dict[str, Any]]
    row_count: int
    estimated_tokens: int
    truncated: bool
    warning: str | None = None
    pagination: Pagination


class ExportResult(CamelModel):
    data: list[dict[str, Any]]
    row_count: int
    capped: bool
