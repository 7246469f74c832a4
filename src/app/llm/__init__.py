"""LLM integration: an OpenAI-compatible chat client and typed prompts."""

from app.llm.client.chat import ChatCompletionClient
from app.llm.exceptions import (
    LLMConfigurationError,
    LLMError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
    LLMValidationError,
)
from app.llm.models import LLMCompletionResult
from app.llm.prompts.base import BasePrompt


__all__ = [
    "BasePrompt",
    "ChatCompletionClient",
    "LLMCompletionResult",
    "LLMConfigurationError",
    "LLMError",
    "LLMRateLimitError",
    "LLMResponseError",
    "LLMTimeoutError",
    "LLMUnavailableError",
    "LLMValidationError",
]
