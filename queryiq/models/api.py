"""
API request and response models.

JSON bodies use camelCase keys (``projectId``, ``parametersSchema``) to
match the payloads the tools hand to the model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from queryiq.llm.models import LLMMessage
from queryiq.models.base import CamelModel
from queryiq.models.database import DatabaseKind
from queryiq.models.schema import DatabaseSummary
from queryiq.projects.models import Project


class HealthResponse(BaseModel):
    """Response model for health check endpoints."""

    status: str = Field(..., description="Service status: 'healthy' or 'unhealthy'")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Current timestamp (ISO 8601)")
    checks: dict[str, bool] = Field(default_factory=dict, description="Component availability")


class ToolInfo(CamelModel):
    """Tool definition summary."""

    name: str
    description: str
    category: str
    has_execute: bool
    parameters_schema: dict[str, Any]


class ToolExecuteRequest(CamelModel):
    """Arguments for a single tool call."""

    arguments: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class ToolExecuteResponse(CamelModel):
    """Structured tool output; errors are carried inside ``output``."""

    tool: str = Field(..., description="Tool name")
    success: bool = Field(..., description="Whether the output carries no error")
    output: dict[str, Any] = Field(default_factory=dict, description="Tool output payload")


class ChatTurnRequest(CamelModel):
    """Conversation so far; the last message is usually the user's."""

    messages: list[LLMMessage] = Field(..., min_length=1)


class ExportRequest(CamelModel):
    project_id: UUID
    query: str = Field(..., description="SELECT query to export")
    sheet_name: str | None = Field(None, description="Worksheet name for .xlsx output")
    filename: str | None = Field(None, description="Download filename for .xlsx output")

    @field_validator("query")
    @classmethod
    def require_query(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class ProjectResponse(CamelModel):
    """A project as returned to clients; never carries the connection string."""

    id: UUID
    name: str
    description: str | None = None
    db_type: DatabaseKind
    database_summary: DatabaseSummary | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_project(cls, project: Project) -> "ProjectResponse":
        return cls.model_validate(project.model_dump())
