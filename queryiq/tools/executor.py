"""Tool execution boundary."""

from __future__ import annotations

import inspect
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from queryiq.tools.base import ToolInvocation, ToolInvocationState
from queryiq.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def _format_validation_error(name: str, exc: PydanticValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "ctx")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return f"Invalid arguments for {name}: " + "; ".join(problems)


class ToolExecutor:
    """
    Runs tools from a ToolRegistry.

    Nothing raised by a tool handler escapes ``execute``: failures become a
    structured ``{"error": ...}`` output (plus the tool's domain field set
    to null) that is handed back to the model as data.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    async def execute(self, name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
        definition = self.registry.get_definition(name)
        handler = self.registry.get_handler(name)
        if not definition or not handler:
            logger.warning(f"Unknown tool requested: {name}")
            return {"error": f"Unknown tool: {name}"}
        if not definition.has_execute:
            return definition.error_output(
                f"Tool {name} has no server-side execution; it is answered by the client."
            )

        args = args or {}
        ctx = self.registry.context
        ctx.log_action("tool_invoked", {"tool": name, "args": list(args.keys())})

        try:
            result = handler(**definition.bind_arguments(args), ctx=ctx)
            if inspect.isawaitable(result):
                result = await result
        except PydanticValidationError as exc:
            message = _format_validation_error(name, exc)
            logger.warning(message)
            return definition.error_output(message)
        except Exception as exc:
            logger.error(f"Tool execution failed: {name} - {exc}")
            return definition.error_output(str(exc) or exc.__class__.__name__)

        ctx.log_action("tool_completed", {"tool": name, "error": "error" in result})
        return result

    async def run(self, invocation: ToolInvocation) -> ToolInvocation:
        """
        Advance an invocation whose input is available to its terminal state.

        Signal-only tools are left at ``input-available`` for the client to
        answer.
        """
        if invocation.state is not ToolInvocationState.INPUT_AVAILABLE:
            return invocation
        definition = self.registry.get_definition(invocation.tool_name)
        if definition is not None and not definition.has_execute:
            return invocation
        output = await self.execute(invocation.tool_name, invocation.input)
        invocation.complete(output)
        return invocation
