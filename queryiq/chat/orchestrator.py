"""
ChatOrchestrator: one chat turn between the hosted model and the tools.

The model sees the per-kind system prompt and the tool declarations for
the project's database. Each requested tool call is executed in order
through the ToolExecutor and its structured output is fed back, until the
model answers in plain text, asks for a client-side tool
(askForConfirmation / generateExcel), or the round limit is hit.

Conversation history is owned by the caller: it is passed in, and the new
messages produced during the turn are returned.
"""

from __future__ import annotations

import json
import logging
from enum import StrEnum

from pydantic import Field

from queryiq.config import LLMSettings, QuerySettings
from queryiq.llm.base import BaseLLMProvider
from queryiq.llm.models import LLMMessage, LLMRequest
from queryiq.models.base import CamelModel
from queryiq.models.results import PaginationConfig
from queryiq.projects.models import Project
from queryiq.prompts import build_system_prompt
from queryiq.security.encryption import CredentialCipher
from queryiq.tools.base import ToolInvocation, ToolInvocationState
from queryiq.tools.executor import ToolExecutor
from queryiq.tools.registry import build_tool_registry

logger = logging.getLogger(__name__)


class TurnStatus(StrEnum):
    COMPLETED = "completed"
    AWAITING_CLIENT = "awaiting-client"
    MAX_ROUNDS = "max-rounds"


class ChatTurnResult(CamelModel):
    text: str = ""
    status: TurnStatus
    messages: list[LLMMessage] = Field(default_factory=list)
    invocations: list[ToolInvocation] = Field(default_factory=list)

    @property
    def pending(self) -> list[ToolInvocation]:
        """Invocations waiting for the client to supply an output."""
        return [inv for inv in self.invocations if inv.state is ToolInvocationState.INPUT_AVAILABLE]


def tool_result_message(tool_call_id: str, output: dict) -> LLMMessage:
    """Wrap a tool output (server-side or client-supplied) as a tool message."""
    return LLMMessage(
        role="tool",
        tool_call_id=tool_call_id,
        content=json.dumps(output, default=str),
    )


class ChatOrchestrator:
    """Drive the model/tool loop for a project."""

    def __init__(
        self,
        llm: BaseLLMProvider,
        cipher: CredentialCipher,
        pagination_config: PaginationConfig | None = None,
        query_settings: QuerySettings | None = None,
        llm_settings: LLMSettings | None = None,
    ) -> None:
        self.llm = llm
        self.cipher = cipher
        self.pagination = pagination_config or PaginationConfig()
        self.query_settings = query_settings or QuerySettings()
        self.max_tool_rounds = (llm_settings or LLMSettings()).max_tool_rounds

    async def run_turn(self, project: Project, messages: list[LLMMessage]) -> ChatTurnResult:
        target = project.target(self.cipher)
        registry = build_tool_registry(target, self.pagination, self.query_settings)
        executor = ToolExecutor(registry)
        system_prompt = build_system_prompt(project.database_summary, project.db_type, self.pagination)
        tools = registry.to_openai_tools()

        history = [LLMMessage(role="system", content=system_prompt), *messages]
        new_messages: list[LLMMessage] = []
        invocations: list[ToolInvocation] = []
        text = ""

        for round_number in range(1, self.max_tool_rounds + 1):
            response = await self.llm.generate(
                LLMRequest(messages=[*history, *new_messages], tools=tools)
            )
            new_messages.append(response.to_message())
            text = response.content

            if not response.tool_calls:
                logger.info(
                    f"Chat turn completed for project {project.id}",
                    extra={"rounds": round_number, "tool_calls": len(invocations)},
                )
                return ChatTurnResult(
                    text=text,
                    status=TurnStatus.COMPLETED,
                    messages=new_messages,
                    invocations=invocations,
                )

            awaiting_client = False
            for call in response.tool_calls:
                invocation = ToolInvocation(tool_call_id=call.id, tool_name=call.name)
                invocation.receive_input(call.arguments)
                invocations.append(invocation)
                await executor.run(invocation)

                if invocation.state is ToolInvocationState.INPUT_AVAILABLE:
                    awaiting_client = True
                    continue
                new_messages.append(tool_result_message(invocation.tool_call_id, invocation.output))

            if awaiting_client:
                logger.info(f"Chat turn paused for client tool output (project {project.id})")
                return ChatTurnResult(
                    text=text,
                    status=TurnStatus.AWAITING_CLIENT,
                    messages=new_messages,
                    invocations=invocations,
                )

        logger.warning(
            f"Chat turn hit the tool round limit ({self.max_tool_rounds}) for project {project.id}"
        )
        return ChatTurnResult(
            text=text,
            status=TurnStatus.MAX_ROUNDS,
            messages=new_messages,
            invocations=invocations,
        )
