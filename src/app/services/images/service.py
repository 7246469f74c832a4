"""Fetch a recipe's upstream image so clients can load it same-origin."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from app.core.config import get_settings
from app.database.repositories.recipes import RecipeRepository
from app.observability.logging import get_logger
from app.services.images.exceptions import (
    ImageFetchError,
    ImageNotFoundError,
    InvalidRecipeIdError,
)


logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "image/png"
CACHE_CONTROL = "public, max-age=86400"


@dataclass(frozen=True)
class ProxiedImage:
    content: bytes
    content_type: str


def parse_recipe_id(raw: str) -> int:
    """Parse a path id; anything but a positive integer is rejected."""
    # int() alone would also take "1_0", " 7 " and non-ASCII digits
    if not (raw.isascii() and raw.isdigit()) or int(raw) <= 0:
        msg = "Invalid recipe ID"
        raise InvalidRecipeIdError(msg)
    return int(raw)


class RecipeImageProxy:
    def __init__(self, recipes: RecipeRepository | None = None) -> None:
        self.settings = get_settings()
        self._recipes = recipes or RecipeRepository()
        self._http_client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.scraping.fetch_timeout),
            follow_redirects=True,
        )

    async def shutdown(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch(self, raw_id: str) -> ProxiedImage:
        """Return the image bytes for recipe ``raw_id``.

        Raises:
            InvalidRecipeIdError: ``raw_id`` is not a positive integer.
            ImageNotFoundError: No recipe or no image URL.
            ImageFetchError: Upstream returned non-2xx or was unreachable.
        """
        recipe_id = parse_recipe_id(raw_id)
        recipe = await self._recipes.get_by_id(recipe_id)
        if recipe is None or not recipe.image_url:
            msg = "No image"
            raise ImageNotFoundError(msg)

        if self._http_client is None:
            await self.initialize()
        assert self._http_client is not None

        try:
            response = await self._http_client.get(
                recipe.image_url, headers={"Accept": "image/*"}
            )
        except httpx.RequestError as e:
            logger.warning("Image fetch failed", recipe_id=recipe_id, error=str(e))
            msg = "Failed to fetch image"
            raise ImageFetchError(msg) from e

        if not response.is_success:
            logger.warning(
                "Image upstream error",
                recipe_id=recipe_id,
                status_code=response.status_code,
            )
            msg = f"Upstream returned {response.status_code}"
            raise ImageFetchError(msg)

        return ProxiedImage(
            content=response.content,
            content_type=response.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
        )
