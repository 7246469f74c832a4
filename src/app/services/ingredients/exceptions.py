"""Ingredient service exceptions."""

from __future__ import annotations


class IngredientError(Exception):
    """Base exception for ingredient operations."""


class IngredientNotFoundError(IngredientError):
    """The ingredient does not exist."""


class PantryItemNotFoundError(IngredientError):
    """The pantry entry does not exist."""


class PantryAccessDeniedError(IngredientError):
    """The pantry entry belongs to another user."""


class RecognitionError(IngredientError):
    """The LLM could not identify ingredients in an image."""
