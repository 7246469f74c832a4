"""LLM client exceptions.

Services catch these and either degrade or surface a 502.
"""

from __future__ import annotations


class LLMError(Exception):
    """Base exception for LLM client errors."""


class LLMUnavailableError(LLMError):
    """The provider could not be reached."""


class LLMTimeoutError(LLMUnavailableError):
    """The request timed out after all retries."""


class LLMResponseError(LLMError):
    """The provider answered with an HTTP error."""


class LLMValidationError(LLMError):
    """The completion did not match the requested output schema."""


class LLMRateLimitError(LLMError):
    """The provider rejected the request with 429."""


class LLMConfigurationError(LLMError):
    """The client is disabled or has no API key."""
