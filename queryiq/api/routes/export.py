"""Export routes: full-result SELECT exports, as JSON or an .xlsx workbook."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from queryiq.api.dependencies import get_export_service, resolve_project_target
from queryiq.export import build_workbook, safe_sheet_name
from queryiq.models.api import ExportRequest
from queryiq.models.results import ExportResult

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/chat/execute-export", response_model=ExportResult)
async def execute_export(payload: ExportRequest) -> ExportResult:
    """Run a SELECT with the export row cap and timeout; returns every row."""
    _, target = await resolve_project_target(payload.project_id)
    return await get_export_service().run_export(target, payload.query)


@router.post("/chat/execute-export/xlsx")
async def execute_export_xlsx(payload: ExportRequest) -> Response:
    """Same as execute-export, written to a workbook."""
    _, target = await resolve_project_target(payload.project_id)
    result = await get_export_service().run_export(target, payload.query)
    content = build_workbook(result.data, payload.sheet_name)

    filename = payload.filename or safe_sheet_name(payload.sheet_name)
    if not filename.lower().endswith(".xlsx"):
        filename = f"{filename}.xlsx"
    logger.info(f"Exported {result.row_count} rows to {filename} (capped={result.capped})")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Row-Count": str(result.row_count),
            "X-Capped": str(result.capped).lower(),
        },
    )
