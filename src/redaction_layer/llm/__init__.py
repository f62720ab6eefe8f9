"""LLM client layer: HTTP clients, prompt construction and client errors."""

from redaction_layer.llm.base_client import BaseLLMClient
from redaction_layer.llm.exceptions import (
    LLMAuthenticationError,
    LLMBadRequestError,
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from redaction_layer.llm.ollama_client import OllamaClient
from redaction_layer.llm.openai_client import OpenAICompatibleClient
from redaction_layer.llm.prompt_builder import PromptBuilder

__all__ = [
    "BaseLLMClient",
    "OllamaClient",
    "OpenAICompatibleClient",
    "PromptBuilder",
    "LLMClientError",
    "LLMConnectionError",
    "LLMTimeoutError",
    "LLMGenerationError",
    "LLMRateLimitError",
    "LLMBadRequestError",
    "LLMAuthenticationError",
    "LLMModelNotAvailableError",
]
