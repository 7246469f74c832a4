"""HTTP client for TheMealDB public recipe API."""

from __future__ import annotations

from typing import Any

import httpx

from app.core.config import get_settings
from app.observability.logging import get_logger
from app.services.mealdb.exceptions import MealDBUnavailableError
from app.services.mealdb.models import MealSummary


logger = get_logger(__name__)


class MealDBClient:
    """Search and look up meals on TheMealDB.

    Example:
        ```python
        client = MealDBClient()
        await client.initialize()
        meals = await client.filter_by_ingredient("chicken")
        await client.shutdown()
        ```
    """

    def __init__(self) -> None:
        self._settings = get_settings()
        self._http_client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        self._http_client = httpx.AsyncClient(
            base_url=self._settings.mealdb.base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(self._settings.mealdb.timeout),
            headers={"Accept": "application/json"},
        )
        logger.info("MealDBClient initialized")

    async def shutdown(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_meals(self, path: str, params: dict[str, str]) -> list[dict[str, Any]]:
        if not self._http_client:
            msg = "Client not initialized. Call initialize() first."
            raise RuntimeError(msg)
        try:
            response = await self._http_client.get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("TheMealDB returned an error", status_code=e.response.status_code)
            msg = f"TheMealDB returned {e.response.status_code}"
            raise MealDBUnavailableError(msg) from e
        except (httpx.RequestError, ValueError) as e:
            logger.warning("TheMealDB request failed", error=str(e))
            msg = f"TheMealDB request failed: {e}"
            raise MealDBUnavailableError(msg) from e
        # The API answers {"meals": null} when nothing matches
        return (data or {}).get("meals") or []

    async def filter_by_ingredient(self, ingredient: str) -> list[MealSummary]:
        meals = await self._get_meals("filter.php", {"i": ingredient})
        return [MealSummary.model_validate(meal) for meal in meals]

    async def lookup(self, meal_id: str) -> dict[str, Any] | None:
        """Full meal record by id, or ``None`` when unknown."""
        meals = await self._get_meals("lookup.php", {"i": meal_id})
        return meals[0] if meals else None
