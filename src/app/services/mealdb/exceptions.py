"""TheMealDB client exceptions."""

from __future__ import annotations


class MealDBError(Exception):
    """Base exception for TheMealDB client errors."""


class MealDBUnavailableError(MealDBError):
    """TheMealDB could not be reached or answered with an HTTP error."""
