"""Request and response models for OpenAI-compatible chat completions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class LLMCompletionResult(BaseModel):
    """A completion with its parsed structured output, if any."""

    raw_response: str
    parsed: Any | None = None
    model: str
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    cached: bool = False

    model_config = {"frozen": True}


class ChatRequest(BaseModel):
    """Body for ``POST {base_url}/chat/completions``.

    ``content`` of a message is either text or a list of parts, which is
    how images are attached for vision models.
    """

    model: str
    messages: list[dict[str, Any]]
    response_format: dict[str, str] | None = None
    temperature: float = 0.1
    max_tokens: int | None = None


class ChatMessage(BaseModel):
    role: str
    content: str | None = None


class ChatChoice(BaseModel):
    index: int = 0
    message: ChatMessage
    finish_reason: str | None = None


class ChatUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatResponse(BaseModel):
    """Subset of the chat completions response that the client reads."""

    id: str | None = None
    model: str
    choices: list[ChatChoice] = Field(..., min_length=1)
    usage: ChatUsage | None = None
