"""Tool system entrypoint."""

from __future__ import annotations

from queryiq.tools.base import (
    ToolCategory,
    ToolContext,
    ToolDefinition,
    ToolInvocation,
    ToolInvocationState,
    tool,
)
from queryiq.tools.executor import ToolExecutor
from queryiq.tools.registry import ToolCatalog, ToolRegistry, build_tool_registry

__all__ = [
    "ToolCategory",
    "ToolContext",
    "ToolDefinition",
    "ToolInvocation",
    "ToolInvocationState",
    "ToolExecutor",
    "ToolCatalog",
    "ToolRegistry",
    "build_tool_registry",
    "tool",
]
