"""Tests for the LLM provider factory."""

import pytest

from queryiq.config import LLMSettings
from queryiq.llm.factory import create_llm_provider
from queryiq.llm.openai import OpenAIProvider


def test_creates_openai_provider():
    config = LLMSettings(
        openai_api_key="sk-test-key-1234567890abcdefghij",
        model="gpt-4o",
        temperature=0.2,
        max_tokens=1000,
        timeout=10,
    )

    provider = create_llm_provider(config)

    assert isinstance(provider, OpenAIProvider)
    assert provider.model == "gpt-4o"
    assert provider.temperature == 0.2
    assert provider.max_tokens == 1000
    assert provider.timeout == 10


def test_missing_key(monkeypatch):
    monkeypatch.delenv("LLM_OPENAI_API_KEY", raising=False)

    with pytest.raises(ValueError, match="OpenAI API key not configured"):
        create_llm_provider(LLMSettings(openai_api_key=None, _env_file=None))
