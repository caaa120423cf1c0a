"""
Health Check Routes

FastAPI endpoint for service liveness and component availability.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, status

from queryiq import __version__
from queryiq.models.api import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health() -> HealthResponse:
    """
    Basic liveness check.

    Always 200 while the process is alive; ``checks`` reports which
    optional components were initialized at startup.
    """
    from queryiq.api.main import app_state

    checks = {
        "project_store": app_state.get("project_store") is not None,
        "encryption": app_state.get("cipher") is not None,
        "chat": app_state.get("orchestrator") is not None,
    }
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
        checks=checks,
    )
