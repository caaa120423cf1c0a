"""Project persistence in the system database."""

from __future__ import annotations

import logging
from uuid import UUID

import asyncpg

from queryiq.config import get_settings
from queryiq.models.schema import DatabaseSummary
from queryiq.projects.models import Project

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS projects (
    id UUID PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    db_type TEXT NOT NULL,
    connection_secret TEXT NOT NULL,
    database_summary JSONB,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);
"""

_COLUMNS = """
    id,
    name,
    description,
    db_type,
    connection_secret,
    database_summary,
    created_at,
    updated_at
"""


class ProjectNotFoundError(KeyError):
    """Raised when a project id has no row."""

    def __init__(self, project_id: UUID | str) -> None:
        self.project_id = str(project_id)
        super().__init__(f"Project not found: {project_id}")

    def __str__(self) -> str:
        return f"Project not found: {self.project_id}"


class ProjectStore:
    """Manage projects stored in the system database."""

    def __init__(
        self,
        system_database_url: str | None = None,
        pool: asyncpg.Pool | None = None,
    ) -> None:
        if system_database_url is None and pool is None:
            configured = get_settings().system_database.url
            system_database_url = str(configured) if configured else None
        self._system_database_url = system_database_url
        self._pool = pool

    async def initialize(self) -> None:
        """Initialize connection pool and ensure the projects table exists."""
        if self._pool is None:
            if not self._system_database_url:
                raise RuntimeError("SYSTEM_DATABASE_URL must be set to store projects.")
            dsn = self._normalize_postgres_url(self._system_database_url)
            self._pool = await asyncpg.create_pool(dsn=dsn, min_size=1, max_size=5)
        await self._pool.execute(_CREATE_TABLE_SQL)
        logger.info("Project store initialized")

    async def close(self) -> None:
        """Close the underlying connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def create_project(self, project: Project) -> Project:
        self._ensure_pool()
        row = await self._pool.fetchrow(
            f"""
            INSERT INTO projects (
                id,
                name,
                description,
                db_type,
                connection_secret,
                database_summary,
                created_at,
                updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7, $8)
            RETURNING {_COLUMNS}
            """,
            project.id,
            project.name,
            project.description,
            project.db_type.value,
            project.connection_secret,
            self._dump_summary(project.database_summary),
            project.created_at,
            project.updated_at,
        )
        logger.info(f"Created project {project.id} ({project.db_type.value})")
        return self._row_to_project(row)

    async def get_project(self, project_id: UUID | str) -> Project:
        """Retrieve a single project."""
        self._ensure_pool()
        project_uuid = self._coerce_uuid(project_id)
        row = await self._pool.fetchrow(
            f"SELECT {_COLUMNS} FROM projects WHERE id = $1",
            project_uuid,
        )
        if row is None:
            raise ProjectNotFoundError(project_id)
        return self._row_to_project(row)

    async def list_projects(self) -> list[Project]:
        """List projects, newest first."""
        self._ensure_pool()
        rows = await self._pool.fetch(f"SELECT {_COLUMNS} FROM projects ORDER BY created_at DESC")
        return [self._row_to_project(row) for row in rows]

    async def update_summary(self, project_id: UUID | str, summary: DatabaseSummary) -> Project:
        """Replace a project's stored database summary."""
        self._ensure_pool()
        project_uuid = self._coerce_uuid(project_id)
        row = await self._pool.fetchrow(
            f"""
            UPDATE projects
            SET database_summary = $2::jsonb, updated_at = NOW()
            WHERE id = $1
            RETURNING {_COLUMNS}
            """,
            project_uuid,
            self._dump_summary(summary),
        )
        if row is None:
            raise ProjectNotFoundError(project_id)
        return self._row_to_project(row)

    async def delete_project(self, project_id: UUID | str) -> None:
        self._ensure_pool()
        project_uuid = self._coerce_uuid(project_id)
        result = await self._pool.execute("DELETE FROM projects WHERE id = $1", project_uuid)
        deleted = int(result.split()[-1]) if result else 0
        if deleted == 0:
            raise ProjectNotFoundError(project_id)

    def _row_to_project(self, row: asyncpg.Record) -> Project:
        raw_summary = row["database_summary"]
        if raw_summary is None:
            summary = None
        elif isinstance(raw_summary, str):
            summary = DatabaseSummary.model_validate_json(raw_summary)
        else:
            summary = DatabaseSummary.model_validate(raw_summary)
        return Project(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            db_type=row["db_type"],
            connection_secret=row["connection_secret"],
            database_summary=summary,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _dump_summary(summary: DatabaseSummary | None) -> str | None:
        if summary is None:
            return None
        return summary.model_dump_json(by_alias=True)

    def _ensure_pool(self) -> None:
        if self._pool is None:
            raise RuntimeError("ProjectStore is not initialized")

    @staticmethod
    def _coerce_uuid(project_id: UUID | str) -> UUID:
        if isinstance(project_id, UUID):
            return project_id
        try:
            return UUID(str(project_id))
        except ValueError as exc:
            raise ProjectNotFoundError(project_id) from exc

    @staticmethod
    def _normalize_postgres_url(database_url: str) -> str:
        if database_url.startswith("postgresql+asyncpg://"):
            return database_url.replace("postgresql+asyncpg://", "postgresql://", 1)
        return database_url
