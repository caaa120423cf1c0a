"""Prompt templates and the system prompt builder."""

from queryiq.prompts.builder import build_system_prompt
from queryiq.prompts.loader import PromptLoader

__all__ = ["PromptLoader", "build_system_prompt"]
