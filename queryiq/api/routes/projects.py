"""Project routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response, status

from queryiq.api.dependencies import get_project_service, get_project_store
from queryiq.models.api import ProjectResponse
from queryiq.projects import ProjectCreate

router = APIRouter()


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(payload: ProjectCreate) -> ProjectResponse:
    """Introspect the database and save it as a project."""
    project = await get_project_service().create_project(payload)
    return ProjectResponse.from_project(project)


@router.get("/projects", response_model=list[ProjectResponse])
async def list_projects() -> list[ProjectResponse]:
    projects = await get_project_store().list_projects()
    return [ProjectResponse.from_project(project) for project in projects]


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: UUID) -> ProjectResponse:
    return ProjectResponse.from_project(await get_project_store().get_project(project_id))


@router.post("/projects/{project_id}/refresh", response_model=ProjectResponse)
async def refresh_project(project_id: UUID) -> ProjectResponse:
    """Re-introspect the project's database and store the new summary."""
    project = await get_project_service().refresh_project_summary(project_id)
    return ProjectResponse.from_project(project)


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: UUID) -> Response:
    await get_project_store().delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
