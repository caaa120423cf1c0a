"""Tests for LLM request/response models."""

import pytest
from pydantic import ValidationError

from queryiq.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMToolCall


class TestLLMMessage:
    def test_user_message(self):
        message = LLMMessage(role="user", content="Hello")
        assert message.to_openai() == {"role": "user", "content": "Hello"}

    def test_user_message_requires_content(self):
        with pytest.raises(ValidationError, match="user messages require content"):
            LLMMessage(role="user", content="")

    def test_tool_message_requires_call_id(self):
        with pytest.raises(ValidationError, match="tool_call_id"):
            LLMMessage(role="tool", content="{}")

    def test_invalid_role(self):
        with pytest.raises(ValidationError):
            LLMMessage(role="developer", content="x")

    def test_assistant_with_tool_calls(self):
        message = LLMMessage(
            role="assistant",
            tool_calls=[LLMToolCall(id="call_1", name="getSchema")],
        )

        payload = message.to_openai()
        assert payload["content"] is None
        assert payload["tool_calls"] == [
            {"id": "call_1", "type": "function", "function": {"name": "getSchema", "arguments": "{}"}}
        ]


class TestLLMRequest:
    def test_requires_messages(self):
        with pytest.raises(ValidationError):
            LLMRequest(messages=[])

    def test_temperature_bounds(self):
        with pytest.raises(ValidationError):
            LLMRequest(messages=[LLMMessage(role="user", content="x")], temperature=3.0)


class TestLLMResponse:
    def test_to_message(self):
        response = LLMResponse(
            content="",
            tool_calls=[LLMToolCall(id="call_1", name="getSchema")],
            model="gpt-4o",
            finish_reason="tool_calls",
            provider="openai",
        )

        message = response.to_message()
        assert message.role == "assistant"
        assert message.content is None
        assert message.tool_calls[0].id == "call_1"

    def test_defaults(self):
        response = LLMResponse(model="gpt-4o", finish_reason="stop", provider="openai")
        assert response.usage.total_tokens == 0
        assert response.tool_calls == []
