"""Recipe operations: CRUD, imports and daily recommendations.

Imports come from three places: a zip archive of JSON recipes, a recipe
web page (scraped, with an LLM fallback) and TheMealDB.
"""

from __future__ import annotations

import io
import re
import zipfile
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import ValidationError

from app.core.config import get_settings
from app.database.repositories.ingredients import IngredientRepository, RecipeIngredient
from app.database.repositories.recipes import NewRecipe, Recipe, RecipeRepository
from app.llm.exceptions import LLMError
from app.llm.prompts import RecipeExtractionPrompt
from app.observability.logging import get_logger
from app.observability.metrics import record_recipe_import
from app.schemas.recipes import RecipeCreateRequest, RecipeIngredientInput
from app.services.mealdb.models import MealSummary, meal_ingredients
from app.services.recipes.exceptions import (
    MealNotFoundError,
    RecipeAccessDeniedError,
    RecipeImportError,
    RecipeNotFoundError,
    RecipeParseError,
    RecipeSourceUnavailableError,
)
from app.services.scraping.exceptions import RecipeNotFoundError as PageHasNoRecipe
from app.services.scraping.models import ParsedIngredient, ParsedRecipe


if TYPE_CHECKING:
    from app.llm.client.chat import ChatCompletionClient
    from app.services.mealdb.client import MealDBClient
    from app.services.scraping.service import RecipeScraperService


logger = get_logger(__name__)

DAILY_RECOMMENDATION_COUNT = 5
MEALDB_SOURCE = "TheMealDB"

_TAGS = ("script", "style", "noscript", "svg")


def _page_text(html: str, max_chars: int) -> str:
    """Cheap HTML-to-text reduction before sending a page to the LLM."""
    text = html
    for tag in _TAGS:
        text = re.sub(rf"<{tag}\b.*?</{tag}>", " ", text, flags=re.DOTALL | re.IGNORECASE)
    text = re.sub(r"<[^>]+>", " ", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text[:max_chars]


def recommendation_order(recipes: list[Recipe], today: datetime) -> list[Recipe]:
    """Favorites first, then least recently cooked, rotated by day of year."""
    never = datetime.min.replace(tzinfo=UTC)
    ranked = sorted(
        recipes,
        key=lambda r: (not r.is_favorite, r.cooked_at or never, r.id),
    )
    if not ranked:
        return []
    shift = today.timetuple().tm_yday % len(ranked)
    rotated = ranked[shift:] + ranked[:shift]
    return rotated[:DAILY_RECOMMENDATION_COUNT]


class RecipeService:
    """Owns every recipe operation; ownership is checked on user-scoped calls."""

    def __init__(
        self,
        recipes: RecipeRepository | None = None,
        ingredients: IngredientRepository | None = None,
        scraper: RecipeScraperService | None = None,
        llm_client: ChatCompletionClient | None = None,
        mealdb: MealDBClient | None = None,
    ) -> None:
        self._settings = get_settings()
        self._recipes = recipes or RecipeRepository()
        self._ingredients = ingredients or IngredientRepository()
        self._scraper = scraper
        self._llm_client = llm_client
        self._mealdb = mealdb

    # -- CRUD ---------------------------------------------------------------

    async def list_recipes(self, user_id: int) -> list[Recipe]:
        return await self._recipes.list_by_user(user_id)

    async def get_owned(self, user_id: int, recipe_id: int) -> Recipe:
        """Load a recipe and check that ``user_id`` owns it.

        Raises:
            RecipeNotFoundError: No such recipe.
            RecipeAccessDeniedError: The recipe belongs to someone else.
        """
        recipe = await self._recipes.get_by_id(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(f"Recipe {recipe_id} not found")
        if recipe.user_id != user_id:
            raise RecipeAccessDeniedError(
                "Unauthorized: You can only access your own recipes"
            )
        return recipe

    async def create_recipe(
        self,
        user_id: int,
        data: RecipeCreateRequest,
        *,
        external_id: str | None = None,
    ) -> int:
        """Insert the recipe and link its ingredients, creating them as needed."""
        recipe_id = await self._recipes.create(
            NewRecipe(
                user_id=user_id,
                external_id=external_id,
                **data.model_dump(by_alias=False, exclude={"ingredients"}),
            )
        )
        for item in data.ingredients:
            ingredient = await self._ingredients.get_or_create(item.name, item.category)
            await self._ingredients.add_recipe_ingredient(
                recipe_id, ingredient.id, item.quantity, item.unit
            )
        record_recipe_import(data.source)
        logger.info(
            "Recipe created",
            recipe_id=recipe_id,
            source=data.source,
            ingredients=len(data.ingredients),
        )
        return recipe_id

    async def set_favorite(self, user_id: int, recipe_id: int, is_favorite: bool) -> None:
        await self.get_owned(user_id, recipe_id)
        await self._recipes.set_favorite(recipe_id, is_favorite)

    async def mark_cooked(self, user_id: int, recipe_id: int) -> Recipe:
        await self.get_owned(user_id, recipe_id)
        recipe = await self._recipes.mark_cooked(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(f"Recipe {recipe_id} not found")
        return recipe

    async def delete_recipe(self, user_id: int, recipe_id: int) -> None:
        await self.get_owned(user_id, recipe_id)
        await self._recipes.delete(recipe_id)

    async def list_ingredients(self, user_id: int, recipe_id: int) -> list[RecipeIngredient]:
        await self.get_owned(user_id, recipe_id)
        return await self._ingredients.list_recipe_ingredients(recipe_id)

    async def daily_recommendations(
        self, user_id: int, today: datetime | None = None
    ) -> list[Recipe]:
        recipes = await self._recipes.list_by_user(user_id)
        return recommendation_order(recipes, today or datetime.now(UTC))

    # -- zip import ---------------------------------------------------------

    async def import_zip(self, user_id: int, archive: bytes) -> int:
        """Create one recipe per ``*.json`` member of a zip archive.

        Every member is validated before anything is written.

        Raises:
            RecipeImportError: The archive or one of its members is invalid.
        """
        try:
            with zipfile.ZipFile(io.BytesIO(archive)) as zf:
                members = [
                    (info.filename, zf.read(info))
                    for info in zf.infolist()
                    if not info.is_dir() and info.filename.lower().endswith(".json")
                ]
        except zipfile.BadZipFile as e:
            raise RecipeImportError("Upload is not a valid zip archive") from e

        drafts: list[RecipeCreateRequest] = []
        for filename, raw in members:
            try:
                drafts.append(RecipeCreateRequest.model_validate(orjson.loads(raw)))
            except (orjson.JSONDecodeError, ValidationError) as e:
                raise RecipeImportError(f"Invalid recipe in {filename}: {e}") from e

        for draft in drafts:
            await self.create_recipe(user_id, draft)
        logger.info("Zip import completed", imported=len(drafts))
        return len(drafts)

    # -- URL import ---------------------------------------------------------

    async def parse_from_url(self, url: str) -> ParsedRecipe:
        """Scrape ``url``, asking the LLM when the page has no structured recipe.

        Raises:
            RecipeParseError: Neither scraping nor the LLM produced a named recipe.
            ScrapingError: The page could not be fetched.
        """
        if self._scraper is None:
            raise RecipeParseError("Recipe scraper is not available")
        try:
            return await self._scraper.scrape(url)
        except PageHasNoRecipe as e:
            logger.info("Scraping found no recipe, trying LLM", url=url)
            return await self._extract_with_llm(url, e.html)

    async def _extract_with_llm(self, url: str, html: str | None) -> ParsedRecipe:
        if self._llm_client is None or not html:
            raise RecipeParseError("Failed to parse recipe from URL")

        content = _page_text(html, self._settings.scraping.llm_max_html_chars)
        try:
            extracted = await self._llm_client.run_prompt(
                RecipeExtractionPrompt(), url=url, content=content
            )
        except (LLMError, ValueError) as e:
            logger.warning("LLM recipe extraction failed", url=url, error=str(e))
            raise RecipeParseError("Failed to parse recipe from URL") from e

        if not extracted.name:
            raise RecipeParseError("Failed to parse recipe from URL")

        return ParsedRecipe(
            **extracted.model_dump(exclude={"ingredients"}),
            source_url=url,
            ingredients=[
                ParsedIngredient(**i.model_dump()) for i in extracted.ingredients
            ],
        )

    async def save_parsed(self, user_id: int, parsed: ParsedRecipe) -> int:
        """Create a recipe from a parsed page, dropping values that fail validation."""
        return await self.create_recipe(user_id, draft_from_parsed(parsed))

    # -- TheMealDB ----------------------------------------------------------

    async def search_by_ingredients(self, ingredients: list[str]) -> list[MealSummary]:
        """Union of TheMealDB matches for each ingredient; empty on upstream failure."""
        if self._mealdb is None:
            return []
        seen: set[str] = set()
        results: list[MealSummary] = []
        try:
            for ingredient in ingredients:
                for meal in await self._mealdb.filter_by_ingredient(ingredient):
                    if meal.id_meal not in seen:
                        seen.add(meal.id_meal)
                        results.append(meal)
        except Exception as e:  # noqa: BLE001
            logger.warning("TheMealDB search failed", error=str(e))
            return []
        return results

    async def meal_details(self, meal_id: str) -> dict[str, Any] | None:
        if self._mealdb is None:
            return None
        try:
            return await self._mealdb.lookup(meal_id)
        except Exception as e:  # noqa: BLE001
            logger.warning("TheMealDB lookup failed", meal_id=meal_id, error=str(e))
            return None

    async def import_from_mealdb(self, user_id: int, meal_id: str) -> int:
        """Create a recipe from a TheMealDB record.

        Raises:
            MealNotFoundError: Unknown meal id.
            MealDBError: TheMealDB is unavailable.
        """
        if self._mealdb is None:
            raise RecipeSourceUnavailableError("TheMealDB client is not available")
        meal = await self._mealdb.lookup(meal_id)
        if meal is None:
            raise MealNotFoundError("Meal not found")

        data = draft_from_parsed(
            ParsedRecipe(
                name=meal.get("strMeal") or f"Meal {meal_id}",
                instructions=meal.get("strInstructions"),
                image_url=meal.get("strMealThumb"),
                cuisine=meal.get("strArea"),
                category=meal.get("strCategory"),
                source_url=meal.get("strSource") or None,
                source=MEALDB_SOURCE,
                ingredients=[
                    ParsedIngredient(**i.model_dump()) for i in meal_ingredients(meal)
                ],
            )
        )
        return await self.create_recipe(user_id, data, external_id=meal_id)


def draft_from_parsed(parsed: ParsedRecipe) -> RecipeCreateRequest:
    """Convert scraped data into a create request.

    Scraped values outside the create limits are dropped field by field
    instead of rejecting the whole recipe.
    """
    data = parsed.model_dump(exclude={"ingredients"})
    data["name"] = data["name"][:255]
    for key in list(data):
        try:
            RecipeCreateRequest.model_validate({"name": data["name"], key: data[key]})
        except ValidationError:
            logger.debug("Dropping invalid parsed field", field=key)
            data[key] = None if key != "source" else "url_import"

    ingredients = []
    for item in parsed.ingredients[:100]:
        try:
            ingredients.append(RecipeIngredientInput.model_validate(item.model_dump()))
        except ValidationError:
            logger.debug("Dropping invalid parsed ingredient", name=item.name[:50])
    return RecipeCreateRequest(**data, ingredients=ingredients)
