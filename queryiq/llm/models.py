"""
LLM Request and Response Models

Pydantic models for hosted-model interactions with tool calling.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

FinishReason = Literal["stop", "length", "tool_calls", "content_filter", "error"]


class LLMToolCall(BaseModel):
    """A function call requested by the model."""

    id: str = Field(..., description="Provider-assigned call id")
    name: str = Field(..., description="Tool name")
    arguments: str = Field(default="{}", description="JSON-encoded arguments")


class LLMMessage(BaseModel):
    """Single message in an LLM conversation."""

    role: Literal["system", "user", "assistant", "tool"] = Field(
        ...,
        description="Message role"
    )
    content: str | None = Field(
        None,
        description="Message content"
    )
    tool_calls: list[LLMToolCall] = Field(
        default_factory=list,
        description="Tool calls requested by an assistant message"
    )
    tool_call_id: str | None = Field(
        None,
        description="Call id a tool message answers"
    )

    @model_validator(mode="after")
    def validate_shape(self) -> "LLMMessage":
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("Tool messages require tool_call_id")
        if self.role in ("system", "user") and not self.content:
            raise ValueError(f"{self.role} messages require content")
        return self

    def to_openai(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            payload["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        if self.tool_call_id:
            payload["tool_call_id"] = self.tool_call_id
        return payload


class LLMRequest(BaseModel):
    """Request to an LLM provider."""

    messages: list[LLMMessage] = Field(
        ...,
        description="Conversation messages",
        min_length=1
    )
    tools: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Function-calling declarations"
    )
    temperature: float | None = Field(
        None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (overrides default)"
    )
    max_tokens: int | None = Field(
        None,
        gt=0,
        description="Maximum tokens to generate (overrides default)"
    )
    model: str | None = Field(
        None,
        description="Specific model to use (overrides default)"
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional provider-specific parameters"
    )


class LLMUsage(BaseModel):
    """Token usage information."""

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    content: str = Field(
        default="",
        description="Generated text content"
    )
    tool_calls: list[LLMToolCall] = Field(
        default_factory=list,
        description="Tool calls the model wants executed"
    )
    model: str = Field(
        ...,
        description="Model that generated the response"
    )
    usage: LLMUsage = Field(default_factory=LLMUsage)
    finish_reason: FinishReason = Field(
        ...,
        description="Reason the generation stopped"
    )
    provider: str = Field(
        ...,
        description="Provider that handled the request"
    )
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> LLMMessage:
        """The assistant message to append to the conversation."""
        return LLMMessage(
            role="assistant",
            content=self.content or None,
            tool_calls=self.tool_calls,
        )
