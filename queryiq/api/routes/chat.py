"""
Chat routes.

Tool listing and single-tool execution for a project, plus the chat turn
that lets the model drive the tools.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter

from queryiq.api.dependencies import get_orchestrator, get_project_store, resolve_project_target
from queryiq.chat import ChatTurnResult
from queryiq.config import get_settings
from queryiq.models.api import ChatTurnRequest, ToolExecuteRequest, ToolExecuteResponse, ToolInfo
from queryiq.tools import ToolExecutor, build_tool_registry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/chat/{project_id}/tools", response_model=list[ToolInfo])
async def list_tools(project_id: UUID) -> list[ToolInfo]:
    """Tool definitions available for the project's database kind."""
    settings = get_settings()
    _, target = await resolve_project_target(project_id)
    registry = build_tool_registry(target, settings.pagination.to_config(), settings.query)
    return [
        ToolInfo(
            name=definition.name,
            description=definition.description,
            category=definition.category.value,
            has_execute=definition.has_execute,
            parameters_schema=definition.parameters_schema,
        )
        for definition in registry.list_definitions()
    ]


@router.post("/chat/{project_id}/tools/{tool_name}", response_model=ToolExecuteResponse)
async def execute_tool(
    project_id: UUID,
    tool_name: str,
    payload: ToolExecuteRequest,
) -> ToolExecuteResponse:
    """Execute one tool; failures come back as a structured output, not an HTTP error."""
    settings = get_settings()
    _, target = await resolve_project_target(project_id)
    registry = build_tool_registry(target, settings.pagination.to_config(), settings.query)
    output = await ToolExecutor(registry).execute(tool_name, payload.arguments)
    return ToolExecuteResponse(tool=tool_name, success="error" not in output, output=output)


@router.post("/chat/{project_id}", response_model=ChatTurnResult)
async def chat_turn(project_id: UUID, payload: ChatTurnRequest) -> ChatTurnResult:
    """Run one chat turn against the project's database."""
    orchestrator = get_orchestrator()
    project = await get_project_store().get_project(project_id)
    logger.info(f"Chat turn for project {project_id} ({len(payload.messages)} messages)")
    return await orchestrator.run_turn(project, payload.messages)
