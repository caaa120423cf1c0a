"""
Large-limit export path.

Re-validates the query as SELECT-only, caps its LIMIT at the export
ceiling, runs it with the longer export timeout and, for downloads, writes
the rows to an .xlsx workbook with openpyxl.
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Sequence
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from queryiq.config import QuerySettings
from queryiq.connectors.factory import execute_query
from queryiq.models.base import to_jsonable
from queryiq.models.database import DatabaseTarget, SqlQuerySpec
from queryiq.models.results import ExportResult
from queryiq.query.validator import ValidationError, validate_select_only

logger = logging.getLogger(__name__)

EXCEL_SHEET_NAME_LIMIT = 31
DEFAULT_SHEET_NAME = "Results"

_LIMIT_VALUE_RE = re.compile(r"\blimit\s+(?:(\d+)\s*,\s*)?(\d+)", re.IGNORECASE)
_LIMIT_WORD_RE = re.compile(r"\blimit\b", re.IGNORECASE)
_INVALID_SHEET_CHARS_RE = re.compile(r"[\[\]\:\*\?\/\\]")


def cap_export_limit(query: str, max_rows: int = 50000) -> str:
    """
    Bound a SELECT by ``max_rows``.

    - no LIMIT: ``LIMIT max_rows`` is appended (after dropping a trailing ``;``)
    - ``LIMIT n`` with n > max_rows: the first occurrence is rewritten
    - ``LIMIT n`` with n <= max_rows: unchanged

    MySQL's ``LIMIT offset, n`` form keeps its offset and caps ``n``.
    """
    match = _LIMIT_VALUE_RE.search(query)
    if match:
        offset, count = match.group(1), match.group(2)
        if int(count) > max_rows:
            prefix = f"{offset}, " if offset is not None else ""
            return f"{query[: match.start()]}LIMIT {prefix}{max_rows}{query[match.end() :]}"
        return query
    if _LIMIT_WORD_RE.search(query):
        # Non-numeric LIMIT (LIMIT ALL, placeholders); left for the server.
        logger.warning("Export query has a non-numeric LIMIT; leaving it unchanged")
        return query
    return f"{query.strip().rstrip(';').rstrip()} LIMIT {max_rows}"


class ExportService:
    """Runs export queries against relational targets."""

    def __init__(self, settings: QuerySettings | None = None) -> None:
        self.settings = settings or QuerySettings()

    async def run_export(self, target: DatabaseTarget, query: str) -> ExportResult:
        """
        Raises:
            ValidationError: Non-SELECT query, or a MongoDB target
            ConnectionError / QueryExecutionError: From the connector
        """
        if not target.kind.is_relational:
            raise ValidationError("Export is only supported for SQL databases")
        validate_select_only(query).raise_for_error()

        max_rows = self.settings.max_export_rows
        final_query = cap_export_limit(query, max_rows)
        result = await execute_query(
            target,
            SqlQuerySpec(text=final_query),
            self.settings,
            timeout=self.settings.export_timeout_seconds,
        )
        logger.info(
            "Export query completed",
            extra={"row_count": result.row_count, "capped": result.row_count == max_rows},
        )
        return ExportResult(
            data=to_jsonable(result.rows),
            row_count=result.row_count,
            capped=result.row_count == max_rows,
        )


def safe_sheet_name(name: str | None) -> str:
    cleaned = _INVALID_SHEET_CHARS_RE.sub("_", (name or "").strip()).strip("'")
    return cleaned[:EXCEL_SHEET_NAME_LIMIT] or DEFAULT_SHEET_NAME


def _cell_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (dict, list)):
        value = str(value)
    if not isinstance(value, str):
        value = str(value)
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def build_workbook(rows: Sequence[dict[str, Any]], sheet_name: str | None = None) -> bytes:
    """
    Write rows to an .xlsx workbook and return its bytes.

    The header is the union of row keys in first-seen order; missing values
    are left blank.
    """
    headers: list[str] = []
    seen: set[str] = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                headers.append(key)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = safe_sheet_name(sheet_name)
    if headers:
        sheet.append(headers)
        for row in rows:
            sheet.append([_cell_value(row.get(header)) for header in headers])
        for index, header in enumerate(headers, start=1):
            sheet.column_dimensions[get_column_letter(index)].width = min(
                max(len(str(header)) + 2, 10), 50
            )

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
