"""Tool catalog and per-request tool registry."""

from __future__ import annotations

import logging
from typing import Any, Callable

from queryiq.config import QuerySettings
from queryiq.models.database import DatabaseKind, DatabaseTarget
from queryiq.models.results import PaginationConfig
from queryiq.tools.base import ToolCategory, ToolContext, ToolDefinition

logger = logging.getLogger(__name__)


class ToolCatalog:
    """Every declared tool, keyed by category then name. Filled by ``@tool``."""

    _definitions: dict[tuple[ToolCategory, str], ToolDefinition] = {}
    _handlers: dict[tuple[ToolCategory, str], Callable[..., Any]] = {}

    @classmethod
    def register(cls, definition: ToolDefinition, handler: Callable[..., Any]) -> None:
        key = (definition.category, definition.name)
        cls._definitions[key] = definition
        cls._handlers[key] = handler
        logger.debug(f"Registered tool: {definition.category.value}/{definition.name}")

    @classmethod
    def for_category(
        cls, category: ToolCategory
    ) -> list[tuple[ToolDefinition, Callable[..., Any]]]:
        return [
            (definition, cls._handlers[key])
            for key, definition in cls._definitions.items()
            if key[0] is category
        ]


def load_builtin_tools() -> None:
    # Register built-in tools
    from queryiq.tools.builtin import common, mongo, sql  # noqa: F401


def categories_for(kind: DatabaseKind) -> tuple[ToolCategory, ...]:
    if kind is DatabaseKind.POSTGRESQL or kind is DatabaseKind.MYSQL:
        return (ToolCategory.COMMON, ToolCategory.SQL)
    if kind is DatabaseKind.MONGODB:
        return (ToolCategory.COMMON, ToolCategory.MONGO)
    raise ValueError(f"No tool catalog for database kind: {kind}")


class ToolRegistry:
    """The closed set of tools exposed for one database target."""

    def __init__(self, context: ToolContext) -> None:
        self.context = context
        self._definitions: dict[str, ToolDefinition] = {}
        self._handlers: dict[str, Callable[..., Any]] = {}

    def register(self, definition: ToolDefinition, handler: Callable[..., Any]) -> None:
        self._definitions[definition.name] = definition
        self._handlers[definition.name] = handler

    def get_definition(self, name: str) -> ToolDefinition | None:
        return self._definitions.get(name)

    def get_handler(self, name: str) -> Callable[..., Any] | None:
        return self._handlers.get(name)

    def list_definitions(self) -> list[ToolDefinition]:
        return list(self._definitions.values())

    @property
    def names(self) -> list[str]:
        return list(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def to_openai_tools(self) -> list[dict[str, Any]]:
        """Function-calling declarations for the chat completions API."""
        return [
            {
                "type": "function",
                "function": {
                    "name": definition.name,
                    "description": definition.description,
                    "parameters": definition.parameters_schema,
                },
            }
            for definition in self._definitions.values()
        ]


def _bind_definition(definition: ToolDefinition, pagination: PaginationConfig) -> ToolDefinition:
    """Fill threshold placeholders in descriptions and cap page-size arguments."""
    description = definition.description.format(**pagination.model_dump())
    schema = definition.parameters_schema
    limit_schema = schema.get("properties", {}).get("limit")
    if limit_schema is not None:
        limit_schema = {**limit_schema, "maximum": pagination.max_rows_per_page}
        schema = {**schema, "properties": {**schema["properties"], "limit": limit_schema}}
    return definition.model_copy(update={"description": description, "parameters_schema": schema})


def build_tool_registry(
    target: DatabaseTarget,
    pagination_config: PaginationConfig | None = None,
    query_settings: QuerySettings | None = None,
) -> ToolRegistry:
    """Build the tool set for ``target.kind``, bound to a fresh ToolContext."""
    load_builtin_tools()
    pagination = pagination_config or PaginationConfig()
    context = ToolContext(
        target=target,
        pagination=pagination,
        query_settings=query_settings or QuerySettings(),
    )
    registry = ToolRegistry(context)
    for category in categories_for(target.kind):
        for definition, handler in ToolCatalog.for_category(category):
            registry.register(_bind_definition(definition, pagination), handler)

    logger.debug(
        f"Built tool registry for {target.kind.value}: {', '.join(registry.names)}"
    )
    return registry
