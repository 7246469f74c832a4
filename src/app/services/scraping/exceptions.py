"""Recipe scraping exceptions.

Raised by ``RecipeScraperService`` and translated to HTTP errors by the
recipes endpoints.
"""

from __future__ import annotations


class ScrapingError(Exception):
    """Base exception for scraping errors."""


class UnsupportedURLError(ScrapingError):
    """The URL is not a public http(s) address."""


class ScrapingFetchError(ScrapingError):
    """The page could not be downloaded."""


class ScrapingTimeoutError(ScrapingFetchError):
    """Fetching the page timed out."""


class ScrapingParseError(ScrapingError):
    """A supported site returned data that could not be parsed."""


class RecipeNotFoundError(ScrapingError):
    """The page was fetched but contains no recognizable recipe.

    ``html`` keeps the downloaded page so callers can hand it to the LLM
    extractor instead of fetching it again.
    """

    def __init__(self, message: str, html: str | None = None) -> None:
        super().__init__(message)
        self.html = html
