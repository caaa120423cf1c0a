"""
Project creation and summary refresh.

Both flows introspect the external database. Introspection failures are
mapped to short user-facing messages; the underlying error is logged.
"""

from __future__ import annotations

import logging
from uuid import UUID

from queryiq.config import QuerySettings
from queryiq.introspection import (
    DatabaseConnectionError,
    DatabaseIntrospectionError,
    UnsupportedDatabaseError,
    introspect_database,
)
from queryiq.models.database import normalize_database_kind
from queryiq.models.schema import DatabaseSummary
from queryiq.projects.models import Project, ProjectCreate
from queryiq.projects.store import ProjectStore
from queryiq.security.encryption import CredentialCipher

logger = logging.getLogger(__name__)

CONNECTION_FAILED_MESSAGE = "Failed to connect to database. Check your connection string and credentials."
SCHEMA_READ_FAILED_MESSAGE = "Failed to read database schema. Ensure proper permissions."
UNEXPECTED_FAILURE_MESSAGE = "Unexpected error while analyzing the database."


class ProjectCreationError(Exception):
    """Introspection failed; ``message`` is safe to show the user."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ProjectService:
    """Create projects and refresh their stored summaries."""

    def __init__(
        self,
        store: ProjectStore,
        cipher: CredentialCipher,
        query_settings: QuerySettings | None = None,
    ) -> None:
        self.store = store
        self.cipher = cipher
        self.query_settings = query_settings or QuerySettings()

    async def create_project(self, payload: ProjectCreate) -> Project:
        """
        Introspect the database, then persist the project with its summary.

        Raises:
            ProjectCreationError: If the database cannot be analyzed
        """
        summary = await self._analyze(payload.db_url, payload.db_type)
        project = Project(
            name=payload.name,
            description=payload.description,
            db_type=normalize_database_kind(payload.db_type),
            connection_secret=self.cipher.encrypt(payload.db_url),
            database_summary=summary,
        )
        return await self.store.create_project(project)

    async def refresh_project_summary(self, project_id: UUID | str) -> Project:
        """Re-introspect an existing project and store the new summary."""
        project = await self.store.get_project(project_id)
        connection_string = self.cipher.decrypt(project.connection_secret)
        summary = await self._analyze(connection_string, project.db_type)
        return await self.store.update_summary(project.id, summary)

    async def _analyze(self, connection_string: str, db_type: str) -> DatabaseSummary:
        try:
            return await introspect_database(connection_string, db_type, self.query_settings)
        except UnsupportedDatabaseError as exc:
            raise ProjectCreationError(str(exc)) from exc
        except DatabaseConnectionError as exc:
            logger.warning(f"Project database connection failed: {exc}")
            raise ProjectCreationError(CONNECTION_FAILED_MESSAGE) from exc
        except DatabaseIntrospectionError as exc:
            logger.warning(f"Project database introspection failed: {exc}")
            raise ProjectCreationError(SCHEMA_READ_FAILED_MESSAGE) from exc
        except Exception as exc:
            logger.exception("Unexpected error during database introspection")
            raise ProjectCreationError(UNEXPECTED_FAILURE_MESSAGE) from exc
