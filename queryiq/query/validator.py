"""
SQL query validator.

A shallow textual gate applied before any query reaches a live connection:
the trimmed, lower-cased text must start with ``select`` and must contain
``limit``. It is not a parser. A statement such as
``select 1 limit 1; drop table t`` passes when the driver accepts multiple
statements, and any keyword hidden inside a string literal or comment
satisfies the substring checks. The authoritative read-only boundary is a
database role with read-only grants; this gate only catches the model's
honest mistakes.

MongoDB queries are structured (MongoQuerySpec.operation), so there is no
text to validate; unknown operations are rejected by the connector. The
only document-side check is that an aggregation pipeline has no writing
stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from queryiq.models.database import DatabaseKind

SELECT_ONLY_REASON = "Only SELECT queries are allowed"
COUNT_REQUIRED_REASON = "Query must be a COUNT query"
WRITE_STAGES = frozenset({"$out", "$merge"})


class ValidationError(Exception):
    """A query failed the safety gate."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: str | None = None

    def raise_for_error(self) -> None:
        if not self.ok:
            raise ValidationError(self.reason or "Invalid query")


_OK = ValidationResult(ok=True)


def _normalize(text: str) -> str:
    return text.strip().lower()


def is_select(text: str) -> bool:
    return _normalize(text).startswith("select")


def validate_select_only(text: str) -> ValidationResult:
    """SELECT-only rule without the LIMIT requirement (aggregations, export)."""
    if not is_select(text):
        return ValidationResult(ok=False, reason=SELECT_ONLY_REASON)
    return _OK


def validate_sql_query(
    text: str,
    backend_kind: DatabaseKind = DatabaseKind.POSTGRESQL,
    max_rows_per_page: int = 50,
) -> ValidationResult:
    """
    Validate a query for the paginated execute capability.

    Args:
        text: SQL text produced by the model
        backend_kind: Relational backend the query targets
        max_rows_per_page: Page size quoted in the LIMIT rejection reason

    Returns:
        ValidationResult with ok=False and a reason on the first failed rule
    """
    if not backend_kind.is_relational:
        raise ValueError(f"SQL validation does not apply to {backend_kind.value}")

    normalized = _normalize(text)
    if not normalized.startswith("select"):
        return ValidationResult(ok=False, reason=SELECT_ONLY_REASON)
    if "limit" not in normalized:
        return ValidationResult(
            ok=False,
            reason=f"Query must include LIMIT clause (max {max_rows_per_page})",
        )
    return _OK


def validate_pipeline(pipeline: list[dict[str, Any]]) -> ValidationResult:
    """Reject aggregation stages that write ($out, $merge)."""
    for stage in pipeline:
        for operator in stage:
            if operator in WRITE_STAGES:
                return ValidationResult(
                    ok=False, reason=f"Aggregation stage {operator} is not allowed"
                )
    return _OK


def validate_count_query(text: str) -> ValidationResult:
    """Rule for the count-check capability: SELECT-only and must contain ``count(``."""
    result = validate_select_only(text)
    if not result.ok:
        return result
    if "count(" not in _normalize(text):
        return ValidationResult(ok=False, reason=COUNT_REQUIRED_REASON)
    return _OK
