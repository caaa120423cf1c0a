"""Query safety gate and result governance."""

from queryiq.query.governor import ResultGovernor, estimate_tokens, extract_count
from queryiq.query.validator import (
    ValidationError,
    ValidationResult,
    validate_count_query,
    validate_pipeline,
    validate_select_only,
    validate_sql_query,
)

__all__ = [
    "ResultGovernor",
    "estimate_tokens",
    "extract_count",
    "ValidationError",
    "ValidationResult",
    "validate_count_query",
    "validate_pipeline",
    "validate_select_only",
    "validate_sql_query",
]
