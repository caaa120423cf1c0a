"""Tool system base types, decorator and invocation state machine."""

from __future__ import annotations

import inspect
import json
import logging
import types
import uuid
from collections.abc import Callable
from enum import StrEnum
from typing import Annotated, Any, Literal, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, Field, validate_call
from pydantic.alias_generators import to_camel
from pydantic.fields import FieldInfo

from queryiq.config import QuerySettings
from queryiq.models.base import CamelModel
from queryiq.models.database import DatabaseTarget
from queryiq.models.results import PaginationConfig
from queryiq.query.governor import ResultGovernor

logger = logging.getLogger(__name__)
NONE_TYPE = type(None)

_CONSTRAINT_KEYWORDS = (
    ("ge", "minimum"),
    ("le", "maximum"),
    ("gt", "exclusiveMinimum"),
    ("lt", "exclusiveMaximum"),
)


class ToolCategory(StrEnum):
    COMMON = "common"
    SQL = "sql"
    MONGO = "mongo"


class ToolDefinition(BaseModel):
    name: str
    description: str
    category: ToolCategory
    parameters_schema: dict[str, Any]
    argument_names: dict[str, str] = Field(
        default_factory=dict, description="Declared (camelCase) name -> handler parameter"
    )
    error_field: str | None = Field(
        default=None, description="Domain field set to null in error outputs"
    )
    has_execute: bool = True

    def error_output(self, message: str) -> dict[str, Any]:
        output: dict[str, Any] = {"error": message}
        if self.error_field:
            output[self.error_field] = None
        return output

    def bind_arguments(self, args: dict[str, Any]) -> dict[str, Any]:
        """Map declared argument names onto handler parameter names."""
        return {self.argument_names.get(key, key): value for key, value in args.items()}


class ToolContext(BaseModel):
    """Per-request state a tool handler runs against."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    target: DatabaseTarget
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    query_settings: QuerySettings = Field(default_factory=QuerySettings)
    correlation_id: str = Field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def governor(self) -> ResultGovernor:
        return ResultGovernor(self.pagination)

    def log_action(self, action: str, metadata: dict[str, Any]) -> None:
        logger.info(
            "tool_action",
            extra={
                "correlation_id": self.correlation_id,
                "db_kind": self.target.kind.value,
                "action": action,
                "metadata": metadata,
            },
        )


# ============================================================================
# Invocation state machine
# ============================================================================


class ToolInvocationState(StrEnum):
    INPUT_STREAMING = "input-streaming"
    INPUT_AVAILABLE = "input-available"
    OUTPUT_AVAILABLE = "output-available"
    OUTPUT_ERROR = "output-error"


_TRANSITIONS: dict[ToolInvocationState, frozenset[ToolInvocationState]] = {
    ToolInvocationState.INPUT_STREAMING: frozenset(
        {ToolInvocationState.INPUT_AVAILABLE, ToolInvocationState.OUTPUT_ERROR}
    ),
    ToolInvocationState.INPUT_AVAILABLE: frozenset(
        {ToolInvocationState.OUTPUT_AVAILABLE, ToolInvocationState.OUTPUT_ERROR}
    ),
    ToolInvocationState.OUTPUT_AVAILABLE: frozenset(),
    ToolInvocationState.OUTPUT_ERROR: frozenset(),
}


class ToolInvocation(CamelModel):
    """
    One model-issued tool call.

    input-streaming -> input-available -> output-available | output-error.
    Malformed arguments go straight from input-streaming to output-error.
    Outputs that carry an ``error`` key end in output-error; the structured
    error is still kept as ``output`` so it can be fed back to the model.
    """

    tool_call_id: str = Field(default_factory=lambda: f"call_{uuid.uuid4().hex[:24]}")
    tool_name: str
    state: ToolInvocationState = ToolInvocationState.INPUT_STREAMING
    input_text: str = ""
    input: dict[str, Any] | None = None
    output: dict[str, Any] | None = None
    error_text: str | None = None

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self.state]

    def _transition(self, new_state: ToolInvocationState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise ValueError(
                f"Illegal tool invocation transition: {self.state.value} -> {new_state.value}"
            )
        self.state = new_state

    def append_input(self, delta: str) -> None:
        if self.state is not ToolInvocationState.INPUT_STREAMING:
            raise ValueError(f"Cannot stream input in state {self.state.value}")
        self.input_text += delta

    def receive_input(self, arguments: dict[str, Any] | str | None = None) -> None:
        """Finish input; a string (or the streamed text) is parsed as JSON."""
        raw = self.input_text if arguments is None else arguments
        if isinstance(raw, str):
            try:
                parsed = json.loads(raw) if raw.strip() else {}
            except json.JSONDecodeError as exc:
                self.fail(f"Invalid tool arguments: {exc.msg}")
                return
        else:
            parsed = raw
        if not isinstance(parsed, dict):
            self.fail("Tool arguments must be a JSON object")
            return
        self.input = parsed
        self._transition(ToolInvocationState.INPUT_AVAILABLE)

    def complete(self, output: dict[str, Any]) -> None:
        if "error" in output:
            self._transition(ToolInvocationState.OUTPUT_ERROR)
            self.error_text = str(output["error"])
        else:
            self._transition(ToolInvocationState.OUTPUT_AVAILABLE)
        self.output = output

    def fail(self, message: str) -> None:
        self._transition(ToolInvocationState.OUTPUT_ERROR)
        self.error_text = message
        self.output = {"error": message}


# ============================================================================
# Schema extraction
# ============================================================================


def _extract_parameters_schema(func: Callable[..., Any]) -> tuple[dict[str, Any], dict[str, str]]:
    signature = inspect.signature(func)
    type_hints = get_type_hints(func, include_extras=True)
    properties: dict[str, Any] = {}
    required: list[str] = []
    argument_names: dict[str, str] = {}

    for name, param in signature.parameters.items():
        if name in ("ctx", "context"):
            continue
        declared_name = to_camel(name)
        argument_names[declared_name] = name
        resolved_annotation = type_hints.get(name, param.annotation)
        param_schema = _annotation_to_json_schema(resolved_annotation)
        description = param_schema.pop("description", None)
        if param.default is inspect.Parameter.empty:
            required.append(declared_name)
        else:
            if param.default is None:
                param_schema = _ensure_nullable(param_schema)
            else:
                param_schema["default"] = param.default
        if description:
            param_schema["description"] = description
        properties[declared_name] = param_schema

    schema = {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }
    return schema, argument_names


def _annotation_to_json_schema(annotation: Any) -> dict[str, Any]:
    if annotation is inspect.Parameter.empty or annotation is Any:
        return {}

    origin = get_origin(annotation)
    if origin is not None:
        return _origin_to_schema(origin, get_args(annotation))

    if annotation is bool:
        return {"type": "boolean"}
    if annotation is int:
        return {"type": "integer"}
    if annotation is float:
        return {"type": "number"}
    if annotation is str:
        return {"type": "string"}
    if annotation in (dict,):
        return {"type": "object", "additionalProperties": True}
    if annotation in (list, tuple, set, frozenset):
        return {"type": "array", "items": {}}
    if annotation is NONE_TYPE:
        return {"type": "null"}

    if inspect.isclass(annotation):
        if issubclass(annotation, BaseModel):
            schema = annotation.model_json_schema()
            schema.pop("title", None)
            return schema
        return {"type": "string"}

    return {"type": "string"}


def _origin_to_schema(origin: Any, args: tuple[Any, ...]) -> dict[str, Any]:
    if origin is Annotated:
        return _annotated_to_schema(args)

    if origin is Literal:
        values = list(args)
        if not values:
            return {}
        value_types = {type(value) for value in values}
        schema: dict[str, Any] = {"enum": values}
        if len(value_types) == 1:
            only = next(iter(value_types))
            if only is bool:
                schema["type"] = "boolean"
            elif only is int:
                schema["type"] = "integer"
            elif only is float:
                schema["type"] = "number"
            elif only is str:
                schema["type"] = "string"
        return schema

    if origin in (list, tuple, set, frozenset):
        item_schema = _annotation_to_json_schema(args[0]) if args else {}
        return {"type": "array", "items": item_schema}

    if origin is dict:
        value_schema = _annotation_to_json_schema(args[1]) if len(args) > 1 else {}
        return {"type": "object", "additionalProperties": value_schema or True}

    if origin in (Union,):
        return _union_to_schema(args)

    if origin is types.UnionType:
        return _union_to_schema(args)

    return _annotation_to_json_schema(origin)


def _annotated_to_schema(args: tuple[Any, ...]) -> dict[str, Any]:
    base, *metadata = args
    schema = _annotation_to_json_schema(base)
    for item in metadata:
        if not isinstance(item, FieldInfo):
            continue
        if item.description:
            schema["description"] = item.description
        for constraint in item.metadata:
            for attr, keyword in _CONSTRAINT_KEYWORDS:
                value = getattr(constraint, attr, None)
                if value is not None:
                    schema[keyword] = value
    return schema


def _union_to_schema(args: tuple[Any, ...]) -> dict[str, Any]:
    non_none = [arg for arg in args if arg is not NONE_TYPE]
    has_none = len(non_none) != len(args)
    if len(non_none) == 1:
        base_schema = _annotation_to_json_schema(non_none[0])
        return _ensure_nullable(base_schema) if has_none else base_schema
    variants = [_annotation_to_json_schema(arg) for arg in non_none]
    if has_none:
        variants.append({"type": "null"})
    return {"anyOf": variants}


def _ensure_nullable(schema: dict[str, Any]) -> dict[str, Any]:
    if not schema:
        return {"anyOf": [{}, {"type": "null"}]}
    if schema.get("type") == "null":
        return schema
    if "anyOf" in schema:
        variants = schema["anyOf"]
        if not any(variant.get("type") == "null" for variant in variants if isinstance(variant, dict)):
            return {**schema, "anyOf": [*variants, {"type": "null"}]}
        return schema
    return {"anyOf": [schema, {"type": "null"}]}


def tool(
    name: str,
    description: str,
    category: ToolCategory,
    error_field: str | None = None,
    has_execute: bool = True,
):
    """
    Declare a tool. The decorated function's signature becomes its input
    schema; arguments are validated by pydantic when the tool is called.

    Signal-only tools (``has_execute=False``) are declared with a stub whose
    signature documents the input; the stub is never called.
    """

    def decorator(func: Callable[..., Any]):
        from queryiq.tools.registry import ToolCatalog

        parameters_schema, argument_names = _extract_parameters_schema(func)
        tool_def = ToolDefinition(
            name=name,
            description=description,
            category=category,
            parameters_schema=parameters_schema,
            argument_names=argument_names,
            error_field=error_field,
            has_execute=has_execute,
        )
        handler = validate_call(config=ConfigDict(arbitrary_types_allowed=True))(func)
        ToolCatalog.register(tool_def, handler)
        return func

    return decorator
