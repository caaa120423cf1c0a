"""Projects: saved database connections with their introspected summaries."""

from queryiq.projects.models import Project, ProjectCreate
from queryiq.projects.service import ProjectCreationError, ProjectService
from queryiq.projects.store import ProjectNotFoundError, ProjectStore

__all__ = [
    "Project",
    "ProjectCreate",
    "ProjectCreationError",
    "ProjectNotFoundError",
    "ProjectService",
    "ProjectStore",
]
