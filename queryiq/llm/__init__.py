"""Hosted model access with function calling."""

from queryiq.llm.base import BaseLLMProvider
from queryiq.llm.factory import create_llm_provider
from queryiq.llm.models import LLMMessage, LLMRequest, LLMResponse, LLMToolCall, LLMUsage
from queryiq.llm.openai import OpenAIProvider

__all__ = [
    "BaseLLMProvider",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "LLMToolCall",
    "LLMUsage",
    "OpenAIProvider",
    "create_llm_provider",
]
