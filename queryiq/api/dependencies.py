"""Accessors for components initialized during the application lifespan."""

from __future__ import annotations

from uuid import UUID

from fastapi import HTTPException, status

from queryiq.chat import ChatOrchestrator
from queryiq.export import ExportService
from queryiq.models.database import DatabaseTarget
from queryiq.projects import Project, ProjectService, ProjectStore
from queryiq.security.encryption import CredentialCipher


def _require(key: str, detail: str):
    from queryiq.api.main import app_state

    component = app_state.get(key)
    if component is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    return component


def get_project_store() -> ProjectStore:
    return _require(
        "project_store",
        "Project store is unavailable. Ensure SYSTEM_DATABASE_URL is set.",
    )


def get_project_service() -> ProjectService:
    return _require(
        "project_service",
        "Project service is unavailable. Ensure SYSTEM_DATABASE_URL and QUERYIQ_ENCRYPTION_KEY are set.",
    )


def get_cipher() -> CredentialCipher:
    return _require("cipher", "Credential cipher is unavailable. Ensure QUERYIQ_ENCRYPTION_KEY is set.")


def get_orchestrator() -> ChatOrchestrator:
    return _require("orchestrator", "Chat is unavailable. Ensure LLM_OPENAI_API_KEY is set.")


def get_export_service() -> ExportService:
    return _require("export_service", "Export service is unavailable.")


async def resolve_project_target(project_id: UUID | str) -> tuple[Project, DatabaseTarget]:
    """Load a project and decrypt its connection string for this request."""
    project = await get_project_store().get_project(project_id)
    return project, project.target(get_cipher())
