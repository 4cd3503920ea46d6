"""Generative text client and prompt templates."""

from catalog_advisor.services.llm.client import ChatCompletionClient, LLMResponse

__all__ = ["ChatCompletionClient", "LLMResponse"]
