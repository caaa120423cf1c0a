"""
Tests for OpenAI Provider.

Tests OpenAI provider implementation with mocked API calls.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from queryiq.llm.models import LLMMessage, LLMRequest, LLMToolCall
from queryiq.llm.openai import OpenAIProvider


@pytest.fixture
def provider():
    """Create OpenAI provider instance."""
    return OpenAIProvider(
        api_key="sk-test-key-1234567890abcdefghij",
        model="gpt-4o",
        temperature=0.0,
        max_tokens=2000,
        timeout=30,
    )


def _response(content="Hello!", finish_reason="stop", tool_calls=None):
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = content
    mock_response.choices[0].message.tool_calls = tool_calls
    mock_response.choices[0].finish_reason = finish_reason
    mock_response.model = "gpt-4o"
    mock_response.usage.prompt_tokens = 10
    mock_response.usage.completion_tokens = 5
    mock_response.usage.total_tokens = 15
    mock_response.id = "chatcmpl-123"
    mock_response.created = 1234567890
    return mock_response


def _tool_call(call_id, name, arguments):
    call = MagicMock()
    call.id = call_id
    call.function.name = name
    call.function.arguments = arguments
    return call


class TestOpenAIProviderInit:
    """Test OpenAI provider initialization."""

    def test_initialization(self, provider):
        assert provider.model == "gpt-4o"
        assert provider.temperature == 0.0
        assert provider.max_tokens == 2000
        assert provider.timeout == 30
        assert provider.provider_name == "openai"

    def test_client_created(self, provider):
        assert provider.client is not None

    def test_base_url_passed_to_client(self):
        provider = OpenAIProvider(
            api_key="sk-test-key-1234567890abcdefghij",
            base_url="https://gateway.example.com/v1",
        )
        assert str(provider.client.base_url).startswith("https://gateway.example.com/v1")


class TestGenerate:
    """Test generate method."""

    @pytest.mark.asyncio
    async def test_successful_generation(self, provider):
        with patch.object(
            provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=_response("Hello! How can I help?"),
        ) as create:
            request = LLMRequest(messages=[LLMMessage(role="user", content="Hello!")])
            response = await provider.generate(request)

        assert response.content == "Hello! How can I help?"
        assert response.model == "gpt-4o"
        assert response.usage.total_tokens == 15
        assert response.finish_reason == "stop"
        assert response.provider == "openai"
        assert response.tool_calls == []
        params = create.await_args.kwargs
        assert params["messages"] == [{"role": "user", "content": "Hello!"}]
        assert params["temperature"] == 0.0
        assert params["max_tokens"] == 2000
        assert "tools" not in params

    @pytest.mark.asyncio
    async def test_tools_are_forwarded(self, provider):
        tools = [{"type": "function", "function": {"name": "getSchema", "parameters": {}}}]
        with patch.object(
            provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=_response(),
        ) as create:
            await provider.generate(
                LLMRequest(
                    messages=[LLMMessage(role="user", content="Hi")],
                    tools=tools,
                    temperature=0.5,
                    model="gpt-4o-mini",
                )
            )

        params = create.await_args.kwargs
        assert params["tools"] == tools
        assert params["temperature"] == 0.5
        assert params["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_tool_calls_are_mapped(self, provider):
        calls = [_tool_call("call_1", "getRowCount", '{"countQuery": "SELECT COUNT(*) FROM t"}')]
        with patch.object(
            provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=_response(content=None, finish_reason="tool_calls", tool_calls=calls),
        ):
            response = await provider.generate(
                LLMRequest(messages=[LLMMessage(role="user", content="How many?")])
            )

        assert response.content == ""
        assert response.finish_reason == "tool_calls"
        assert response.tool_calls == [
            LLMToolCall(id="call_1", name="getRowCount", arguments='{"countQuery": "SELECT COUNT(*) FROM t"}')
        ]

    @pytest.mark.asyncio
    async def test_assistant_tool_history_is_serialized(self, provider):
        messages = [
            LLMMessage(role="user", content="How many?"),
            LLMMessage(
                role="assistant",
                tool_calls=[LLMToolCall(id="call_1", name="getRowCount", arguments="{}")],
            ),
            LLMMessage(role="tool", tool_call_id="call_1", content='{"count": 3}'),
        ]
        with patch.object(
            provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=_response("There are 3."),
        ) as create:
            await provider.generate(LLMRequest(messages=messages))

        sent = create.await_args.kwargs["messages"]
        assert sent[1]["tool_calls"][0]["function"]["name"] == "getRowCount"
        assert sent[1]["tool_calls"][0]["type"] == "function"
        assert sent[2] == {"role": "tool", "content": '{"count": 3}', "tool_call_id": "call_1"}

    @pytest.mark.asyncio
    async def test_finish_reason_mapping(self, provider):
        with patch.object(
            provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=_response(finish_reason="length"),
        ):
            response = await provider.generate(
                LLMRequest(messages=[LLMMessage(role="user", content="Hi")])
            )

        assert response.finish_reason == "length"
        assert provider._map_finish_reason("function_call") == "tool_calls"
        assert provider._map_finish_reason(None) == "stop"

    @pytest.mark.asyncio
    async def test_api_error_is_raised(self, provider):
        error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))
        with patch.object(
            provider.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            with pytest.raises(openai.APIError):
                await provider.generate(
                    LLMRequest(messages=[LLMMessage(role="user", content="Hi")])
                )
