"""LLM client implementations."""

from app.llm.client.chat import ChatCompletionClient


__all__ = ["ChatCompletionClient"]
