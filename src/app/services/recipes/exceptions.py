"""Recipe service exceptions."""

from __future__ import annotations


class RecipeError(Exception):
    """Base exception for recipe operations."""


class RecipeNotFoundError(RecipeError):
    """The recipe does not exist."""


class RecipeAccessDeniedError(RecipeError):
    """The recipe belongs to another user."""


class RecipeParseError(RecipeError):
    """No recipe could be extracted from a URL, by scraping or by the LLM."""


class RecipeImportError(RecipeError):
    """An import archive or external record could not be used."""


class MealNotFoundError(RecipeError):
    """TheMealDB has no meal with the requested id."""


class RecipeSourceUnavailableError(RecipeError):
    """An import source is not configured in this deployment."""
