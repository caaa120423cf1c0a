"""Project models."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import Field, field_validator

from queryiq.models.base import CamelModel
from queryiq.models.database import DatabaseKind, DatabaseTarget
from queryiq.models.schema import DatabaseSummary
from queryiq.security.encryption import CredentialCipher


class ProjectCreate(CamelModel):
    """Incoming payload for creating a project."""

    name: str
    db_url: str
    db_type: str
    description: str | None = None

    @field_validator("name", "db_url")
    @classmethod
    def require_text(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("db_type")
    @classmethod
    def normalize_db_type(cls, v: str) -> str:
        value = v.strip().lower()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("description")
    @classmethod
    def normalize_description(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class Project(CamelModel):
    """
    A saved database connection plus its introspected summary.

    ``connection_secret`` is the encrypted connection string. It is only
    decrypted when a request needs a live DatabaseTarget.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str | None = None
    db_type: DatabaseKind
    connection_secret: str = Field(..., exclude=True)
    database_summary: DatabaseSummary | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def target(self, cipher: CredentialCipher) -> DatabaseTarget:
        """Decrypt the stored secret into a live target."""
        return DatabaseTarget(connection_secret=cipher.decrypt(self.connection_secret), kind=self.db_type)
