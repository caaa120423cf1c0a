"""
Result governor.

Turns raw counts and raw rows into size-bounded payloads that are safe to
hand back to the model: display-vs-export recommendations, token-budget
truncation and pagination metadata.

Token estimation is ``ceil(utf8_bytes(json(rows)) / 4)``. This is a rough
approximation, not a tokenizer; it only has to be stable enough to keep a
tool result inside the model's context budget.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from queryiq.models.base import to_jsonable
from queryiq.models.results import CountSummary, Pagination, PaginationConfig, RowsPage

logger = logging.getLogger(__name__)

RECOMMEND_EXPORT = "Dataset is large. Recommend exporting to Excel instead of displaying inline."
RECOMMEND_PAGINATE = "Dataset is medium-sized. Use pagination to display results."
RECOMMEND_INLINE = "Dataset is small enough to display directly."
TRUNCATION_WARNING = (
    "Results truncated due to size. Consider using aggregations or exporting to Excel."
)

# Keys drivers use for an unaliased COUNT(*) column.
_COUNT_KEYS = ("count", "count(*)")


def serialize_rows(rows: Sequence[dict[str, Any]]) -> str:
    """Compact JSON used for size estimation; non-JSON values fall back to str()."""
    return json.dumps(list(rows), default=str, ensure_ascii=False, separators=(",", ":"))


def estimate_tokens(rows: Sequence[dict[str, Any]]) -> int:
    return math.ceil(len(serialize_rows(rows).encode("utf-8")) / 4)


def coerce_count(value: Any) -> int:
    """Coerce a driver count value (int, Decimal, str, None) to int; unparseable -> 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError):
        return 0


def extract_count(rows: Sequence[dict[str, Any]]) -> int:
    """Read the count from the first row of a COUNT query result."""
    if not rows:
        return 0
    first = rows[0]
    for key, value in first.items():
        if str(key).strip().lower() in _COUNT_KEYS:
            return coerce_count(value)
    return 0


class ResultGovernor:
    """Applies a PaginationConfig to counts and row sets. Stateless."""

    def __init__(self, config: PaginationConfig | None = None) -> None:
        self.config = config or PaginationConfig()

    def govern_count(self, raw_count: Any) -> CountSummary:
        count = coerce_count(raw_count)
        should_paginate = count > self.config.max_rows_per_page
        should_export = count > self.config.max_rows_before_export

        if should_export:
            recommendation = RECOMMEND_EXPORT
        elif should_paginate:
            recommendation = RECOMMEND_PAGINATE
        else:
            recommendation = RECOMMEND_INLINE

        return CountSummary(
            count=count,
            should_paginate=should_paginate,
            should_export=should_export,
            recommendation=recommendation,
        )

    def govern_rows(
        self,
        raw_rows: Sequence[dict[str, Any]],
        page: int = 1,
        estimated_total: int | None = None,
        *,
        page_size: int | None = None,
        offset: int | None = None,
    ) -> RowsPage:
        """
        Bound a row set by the token budget and attach pagination metadata.

        Args:
            raw_rows: Rows or documents as returned by the connector; converted
                with ``to_jsonable`` before estimation
            page: 1-based page number reported back to the model
            estimated_total: True total from a prior count, when known
            page_size: Rows per page (defaults to max_rows_per_page)
            offset: Rows skipped before this page; overrides page-based math
                for ``hasMore`` when the caller paginates by skip/limit

        Returns:
            RowsPage; ``results`` holds every converted row unless the
            estimate exceeds max_tokens_for_results, in which case it holds
            the first ``truncated_rows`` rows.
        """
        rows = to_jsonable(list(raw_rows))
        size = page_size or self.config.max_rows_per_page
        estimated_tokens = estimate_tokens(rows)
        truncated = estimated_tokens > self.config.max_tokens_for_results

        if truncated:
            logger.info(
                "Truncating result set",
                extra={"row_count": len(rows), "estimated_tokens": estimated_tokens},
            )

        if estimated_total is not None:
            consumed = (offset + size) if offset is not None else page * size
            has_more = consumed < estimated_total
        else:
            # A full page suggests more rows may exist.
            has_more = len(rows) == size

        return RowsPage(
            results=rows[: self.config.truncated_rows] if truncated else rows,
            row_count=len(rows),
            estimated_tokens=estimated_tokens,
            truncated=truncated,
            warning=TRUNCATION_WARNING if truncated else None,
            pagination=Pagination(
                current_page=page,
                has_more=has_more,
                total_estimated=estimated_total,
            ),
        )
