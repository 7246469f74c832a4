"""Base class for LLM prompts.

A prompt bundles its template, system message, output schema and sampling
options so services never build prompt strings inline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel


class BasePrompt[T: BaseModel](ABC):
    """Base class for all LLM prompts.

    Example:
        ```python
        class SummaryPrompt(BasePrompt[Summary]):
            output_schema = Summary
            system_prompt = "You summarize recipes."

            def format(self, text: str) -> str:
                return f"Summarize:\\n\\n{text}"
        ```
    """

    output_schema: ClassVar[type[BaseModel]]
    """Pydantic model the JSON response is validated against."""

    system_prompt: ClassVar[str | None] = None

    temperature: ClassVar[float] = 0.1

    max_tokens: ClassVar[int | None] = None

    @abstractmethod
    def format(self, **kwargs: Any) -> str:
        """Render the user message from input variables."""
        ...

    @property
    def name(self) -> str:
        """Prompt identifier for logging."""
        return self.__class__.__name__
