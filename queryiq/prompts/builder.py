"""System prompt assembly per database kind."""

from __future__ import annotations

from functools import lru_cache

from queryiq.models.database import DatabaseKind
from queryiq.models.results import PaginationConfig
from queryiq.models.schema import DatabaseSummary
from queryiq.prompts.loader import PromptLoader


@lru_cache(maxsize=1)
def _default_loader() -> PromptLoader:
    return PromptLoader()


def _kind_section(kind: DatabaseKind) -> str:
    if kind is DatabaseKind.POSTGRESQL or kind is DatabaseKind.MYSQL:
        return "system/sql.md"
    if kind is DatabaseKind.MONGODB:
        return "system/mongodb.md"
    raise ValueError(f"No system prompt for database kind: {kind}")


def build_system_prompt(
    summary: DatabaseSummary | str | None,
    kind: DatabaseKind,
    pagination_config: PaginationConfig | None = None,
    loader: PromptLoader | None = None,
) -> str:
    """Base instructions plus the SQL or MongoDB rules, with the stored summary embedded."""
    loader = loader or _default_loader()
    pagination = pagination_config or PaginationConfig()
    if isinstance(summary, DatabaseSummary):
        db_summary = summary.render_for_prompt()
    else:
        db_summary = summary or "No summary available."

    variables = {"db_type": kind.value, "db_summary": db_summary, **pagination.model_dump()}
    base = loader.render("system/base.md", **variables)
    section = loader.render(_kind_section(kind), **variables)
    return f"{base}\n\n{section}"
