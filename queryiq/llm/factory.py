"""Construct the configured LLM provider."""

import logging

from queryiq.config import LLMSettings
from queryiq.llm.base import BaseLLMProvider
from queryiq.llm.openai import OpenAIProvider

logger = logging.getLogger(__name__)


def create_llm_provider(config: LLMSettings) -> BaseLLMProvider:
    """
    Create the OpenAI provider from settings.

    Raises:
        ValueError: If no API key is configured
    """
    if not config.openai_api_key:
        raise ValueError("OpenAI API key not configured (LLM_OPENAI_API_KEY)")

    logger.info(f"Creating openai provider with model {config.model}")
    return OpenAIProvider(
        api_key=config.openai_api_key,
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout,
        base_url=config.openai_base_url,
    )
