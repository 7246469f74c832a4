"""Recipe scraper service.

Extraction order:
1. recipe-scrapers for the sites it supports
2. schema.org JSON-LD, or page title plus hero image
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import orjson
from recipe_scrapers import WebsiteNotImplementedError, scrape_html

from app.core.config import get_settings
from app.core.security import is_valid_external_url
from app.observability.logging import get_logger
from app.services.scraping.exceptions import (
    RecipeNotFoundError,
    ScrapingFetchError,
    ScrapingParseError,
    ScrapingTimeoutError,
    UnsupportedURLError,
)
from app.services.scraping.jsonld import extract_recipe_from_html
from app.services.scraping.models import ParsedRecipe
from app.services.scraping.parsing import (
    extract_cooking_time,
    join_instructions,
    parse_ingredient_line,
    parse_servings,
)


if TYPE_CHECKING:
    from collections.abc import Callable

    from redis.asyncio import Redis


logger = get_logger(__name__)

CACHE_KEY_PREFIX = "recipe:scraped:"

_BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def _safe_call(func: Callable[[], Any]) -> Any:
    # recipe-scrapers raises a variety of errors for fields a site lacks
    try:
        result = func()
    except Exception:  # noqa: BLE001
        return None
    return result or None


class RecipeScraperService:
    """Download a recipe page and turn it into a ``ParsedRecipe``.

    Example:
        ```python
        service = RecipeScraperService(cache_client=redis)
        await service.initialize()
        recipe = await service.scrape("https://example.com/lasagna")
        await service.shutdown()
        ```
    """

    def __init__(self, cache_client: Redis[bytes] | None = None) -> None:
        self._settings = get_settings()
        self._cache_client = cache_client
        self._http_client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        """Create the HTTP client."""
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._settings.scraping.fetch_timeout),
            follow_redirects=True,
            headers=_BROWSER_HEADERS,
        )
        logger.info("RecipeScraperService initialized")

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("RecipeScraperService shutdown")

    @property
    def cache_enabled(self) -> bool:
        return self._cache_client is not None and self._settings.scraping.cache_enabled

    async def scrape(self, url: str, *, skip_cache: bool = False) -> ParsedRecipe:
        """Scrape a recipe from ``url``.

        Raises:
            UnsupportedURLError: The URL is not a public http(s) address.
            ScrapingFetchError: The page could not be downloaded.
            ScrapingParseError: A supported site returned unparseable data.
            RecipeNotFoundError: No recipe found; carries the page HTML.
        """
        if not is_valid_external_url(url):
            msg = f"Unsupported URL: {url}"
            raise UnsupportedURLError(msg)

        if not skip_cache and self.cache_enabled:
            cached = await self._get_from_cache(url)
            if cached:
                logger.debug("Cache hit for recipe URL", url=url)
                return cached

        html = await self.fetch_html(url)

        recipe = self._extract_with_recipe_scrapers(url, html)
        if recipe is None:
            logger.debug("Falling back to HTML extraction", url=url)
            recipe = extract_recipe_from_html(html, url)

        if recipe is None:
            logger.info("No recipe data found", url=url)
            msg = f"No recipe data found at {url}"
            raise RecipeNotFoundError(msg, html=html)

        if self.cache_enabled:
            await self._save_to_cache(url, recipe)
        return recipe

    async def fetch_html(self, url: str) -> str:
        """Download ``url`` and return the body as text."""
        if not self._http_client:
            msg = "Service not initialized. Call initialize() first."
            raise RuntimeError(msg)

        try:
            response = await self._http_client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("Request timed out", url=url)
            msg = f"Request timed out: {url}"
            raise ScrapingTimeoutError(msg) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "HTTP error fetching URL",
                url=url,
                status_code=e.response.status_code,
            )
            msg = f"HTTP {e.response.status_code} fetching {url}"
            raise ScrapingFetchError(msg) from e
        except httpx.RequestError as e:
            logger.warning("Request error fetching URL", url=url, error=str(e))
            msg = f"Failed to fetch {url}: {e}"
            raise ScrapingFetchError(msg) from e

        return response.text

    def _extract_with_recipe_scrapers(self, url: str, html: str) -> ParsedRecipe | None:
        try:
            scraper = scrape_html(html, org_url=url)
            title = scraper.title()
        except WebsiteNotImplementedError:
            logger.debug("Site not supported by recipe-scrapers", url=url)
            return None
        except Exception as e:
            logger.warning("recipe-scrapers extraction failed", url=url, error=str(e))
            msg = f"Failed to parse recipe from {url}: {e}"
            raise ScrapingParseError(msg) from e

        if not title:
            return None

        instructions = join_instructions(_safe_call(scraper.instructions_list))
        ingredients = [
            parsed
            for line in _safe_call(scraper.ingredients) or []
            if (parsed := parse_ingredient_line(line)) is not None
        ]
        nutrients = _safe_call(scraper.nutrients) or {}

        recipe = ParsedRecipe(
            name=title,
            description=_safe_call(scraper.description),
            instructions=instructions,
            image_url=_safe_call(scraper.image),
            cuisine=_safe_call(scraper.cuisine),
            category=_safe_call(scraper.category),
            cooking_time=(
                _safe_call(scraper.total_time)
                or _safe_call(scraper.cook_time)
                or _safe_call(scraper.prep_time)
                or extract_cooking_time(instructions)
            ),
            servings=parse_servings(_safe_call(scraper.yields)),
            calories_per_serving=parse_servings(nutrients.get("calories")),
            source_url=url,
            ingredients=ingredients,
        )
        logger.info("Extracted recipe with recipe-scrapers", url=url, title=title)
        return recipe

    async def _get_from_cache(self, url: str) -> ParsedRecipe | None:
        try:
            data = await self._cache_client.get(CACHE_KEY_PREFIX + url)  # type: ignore[union-attr]
            if data:
                return ParsedRecipe.model_validate(orjson.loads(data))
        except Exception as e:  # noqa: BLE001
            logger.debug("Cache read failed", url=url, error=str(e))
        return None

    async def _save_to_cache(self, url: str, recipe: ParsedRecipe) -> None:
        try:
            await self._cache_client.set(  # type: ignore[union-attr]
                CACHE_KEY_PREFIX + url,
                orjson.dumps(recipe.model_dump()),
                ex=self._settings.scraping.cache_ttl,
            )
            logger.debug("Cached scraped recipe", url=url)
        except Exception as e:  # noqa: BLE001
            logger.debug("Cache write failed", url=url, error=str(e))
