"""Unit tests for RecipeService.

Tests cover:
- Ownership checks on user-scoped operations
- Recipe creation with ingredient linking
- Zip archive import
- URL parsing with the LLM fallback
- TheMealDB search and import
- Daily recommendation ordering
"""

from __future__ import annotations

import io
import zipfile
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import orjson
import pytest

from app.llm.exceptions import LLMUnavailableError
from app.llm.prompts import ExtractedIngredient, ExtractedRecipe
from app.schemas.recipes import RecipeCreateRequest, RecipeIngredientInput
from app.services.mealdb.exceptions import MealDBError
from app.services.mealdb.models import MealSummary
from app.services.recipes.exceptions import (
    MealNotFoundError,
    RecipeAccessDeniedError,
    RecipeImportError,
    RecipeNotFoundError,
    RecipeParseError,
    RecipeSourceUnavailableError,
)
from app.services.recipes.service import (
    DAILY_RECOMMENDATION_COUNT,
    MEALDB_SOURCE,
    RecipeService,
    draft_from_parsed,
    recommendation_order,
)
from app.services.scraping.exceptions import RecipeNotFoundError as PageHasNoRecipe
from app.services.scraping.models import ParsedIngredient, ParsedRecipe
from tests.factories import IngredientFactory, RecipeFactory


pytestmark = pytest.mark.unit

URL = "https://food.example.com/shakshuka"


@pytest.fixture
def recipes_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.create.return_value = 100
    repo.get_by_id.return_value = RecipeFactory.build(id=5, user_id=1)
    repo.list_by_user.return_value = []
    return repo


@pytest.fixture
def ingredients_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_or_create.side_effect = lambda name, category=None: IngredientFactory.build(
        id=abs(hash(name)) % 1000, name=name
    )
    return repo


@pytest.fixture
def scraper() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def llm_client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mealdb() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(
    recipes_repo: AsyncMock,
    ingredients_repo: AsyncMock,
    scraper: AsyncMock,
    llm_client: AsyncMock,
    mealdb: AsyncMock,
) -> RecipeService:
    return RecipeService(
        recipes=recipes_repo,
        ingredients=ingredients_repo,
        scraper=scraper,
        llm_client=llm_client,
        mealdb=mealdb,
    )


def _zip(members: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return buffer.getvalue()


class TestOwnership:
    """Tests for get_owned and the operations that use it."""

    async def test_returns_owned_recipe(self, service: RecipeService) -> None:
        recipe = await service.get_owned(1, 5)

        assert recipe.id == 5

    async def test_missing_recipe(
        self, service: RecipeService, recipes_repo: AsyncMock
    ) -> None:
        """Should raise not found for unknown ids."""
        recipes_repo.get_by_id.return_value = None

        with pytest.raises(RecipeNotFoundError):
            await service.get_owned(1, 5)

    async def test_other_users_recipe(self, service: RecipeService) -> None:
        """Should refuse access to another user's recipe."""
        with pytest.raises(RecipeAccessDeniedError, match="your own recipes"):
            await service.get_owned(2, 5)

    async def test_delete_checks_owner_first(
        self, service: RecipeService, recipes_repo: AsyncMock
    ) -> None:
        """Should not delete a recipe the caller does not own."""
        with pytest.raises(RecipeAccessDeniedError):
            await service.delete_recipe(2, 5)

        recipes_repo.delete.assert_not_awaited()

    async def test_set_favorite(
        self, service: RecipeService, recipes_repo: AsyncMock
    ) -> None:
        await service.set_favorite(1, 5, True)

        recipes_repo.set_favorite.assert_awaited_once_with(5, True)

    async def test_mark_cooked_returns_updated_recipe(
        self, service: RecipeService, recipes_repo: AsyncMock
    ) -> None:
        """Should return the row with the new cooked count."""
        cooked = RecipeFactory.build(id=5, cooked_count=1)
        recipes_repo.mark_cooked.return_value = cooked

        assert await service.mark_cooked(1, 5) is cooked

    async def test_list_ingredients_of_foreign_recipe(
        self, service: RecipeService, ingredients_repo: AsyncMock
    ) -> None:
        with pytest.raises(RecipeAccessDeniedError):
            await service.list_ingredients(9, 5)

        ingredients_repo.list_recipe_ingredients.assert_not_awaited()


class TestCreateRecipe:
    """Tests for create_recipe."""

    async def test_links_each_ingredient(
        self,
        service: RecipeService,
        recipes_repo: AsyncMock,
        ingredients_repo: AsyncMock,
    ) -> None:
        """Should get-or-create each ingredient and link it with its quantity."""
        data = RecipeCreateRequest(
            name="Shakshuka",
            servings=2,
            ingredients=[
                RecipeIngredientInput(name="egg", quantity="4"),
                RecipeIngredientInput(name="tomato", quantity="400", unit="g"),
            ],
        )

        recipe_id = await service.create_recipe(1, data)

        assert recipe_id == 100
        new_recipe = recipes_repo.create.call_args.args[0]
        assert new_recipe.user_id == 1
        assert new_recipe.name == "Shakshuka"
        assert new_recipe.servings == 2
        assert ingredients_repo.get_or_create.await_count == 2
        assert ingredients_repo.add_recipe_ingredient.await_count == 2
        last = ingredients_repo.add_recipe_ingredient.call_args.args
        assert last[0] == 100
        assert last[2:] == ("400", "g")

    async def test_records_import_metric(self, service: RecipeService) -> None:
        with patch("app.services.recipes.service.record_recipe_import") as record:
            await service.create_recipe(1, RecipeCreateRequest(name="Soup"))

        record.assert_called_once_with("user_import")


class TestImportZip:
    """Tests for import_zip."""

    async def test_imports_every_json_member(
        self, service: RecipeService, recipes_repo: AsyncMock
    ) -> None:
        """Should create one recipe per JSON file and ignore the rest."""
        archive = _zip(
            {
                "a.json": orjson.dumps({"name": "Dal", "servings": 4}),
                "nested/b.JSON": orjson.dumps({"name": "Pho"}),
                "readme.txt": b"not a recipe",
            }
        )

        imported = await service.import_zip(1, archive)

        assert imported == 2
        names = {c.args[0].name for c in recipes_repo.create.call_args_list}
        assert names == {"Dal", "Pho"}

    async def test_rejects_non_zip(self, service: RecipeService) -> None:
        with pytest.raises(RecipeImportError, match="zip"):
            await service.import_zip(1, b"plain bytes")

    async def test_invalid_member_writes_nothing(
        self, service: RecipeService, recipes_repo: AsyncMock
    ) -> None:
        """Should validate every member before creating any recipe."""
        archive = _zip(
            {
                "a.json": orjson.dumps({"name": "Dal"}),
                "b.json": orjson.dumps({"servings": 2}),
            }
        )

        with pytest.raises(RecipeImportError, match="b.json"):
            await service.import_zip(1, archive)

        recipes_repo.create.assert_not_awaited()

    async def test_malformed_json(self, service: RecipeService) -> None:
        with pytest.raises(RecipeImportError):
            await service.import_zip(1, _zip({"a.json": b"{not json"}))


class TestParseFromUrl:
    """Tests for parse_from_url."""

    async def test_returns_scraped_recipe(
        self, service: RecipeService, scraper: AsyncMock, llm_client: AsyncMock
    ) -> None:
        """Should not call the LLM when scraping succeeds."""
        parsed = ParsedRecipe(name="Shakshuka", source_url=URL)
        scraper.scrape.return_value = parsed

        assert await service.parse_from_url(URL) is parsed
        llm_client.run_prompt.assert_not_awaited()

    async def test_falls_back_to_llm(
        self, service: RecipeService, scraper: AsyncMock, llm_client: AsyncMock
    ) -> None:
        """Should extract with the LLM from the already downloaded page."""
        scraper.scrape.side_effect = PageHasNoRecipe(
            "none", html="<html><script>x()</script><p>Shakshuka: eggs</p></html>"
        )
        llm_client.run_prompt.return_value = ExtractedRecipe(
            name="Shakshuka",
            servings=2,
            ingredients=[ExtractedIngredient(name="egg", quantity="4")],
        )

        parsed = await service.parse_from_url(URL)

        assert parsed.name == "Shakshuka"
        assert parsed.source_url == URL
        assert parsed.ingredients == [ParsedIngredient(name="egg", quantity="4")]
        content = llm_client.run_prompt.call_args.kwargs["content"]
        assert "x()" not in content
        assert "Shakshuka: eggs" in content

    async def test_llm_without_name(
        self, service: RecipeService, scraper: AsyncMock, llm_client: AsyncMock
    ) -> None:
        """Should fail when the LLM finds no recipe either."""
        scraper.scrape.side_effect = PageHasNoRecipe("none", html="<p>blog</p>")
        llm_client.run_prompt.return_value = ExtractedRecipe(name=None)

        with pytest.raises(RecipeParseError):
            await service.parse_from_url(URL)

    async def test_llm_error(
        self, service: RecipeService, scraper: AsyncMock, llm_client: AsyncMock
    ) -> None:
        scraper.scrape.side_effect = PageHasNoRecipe("none", html="<p>blog</p>")
        llm_client.run_prompt.side_effect = LLMUnavailableError("down")

        with pytest.raises(RecipeParseError):
            await service.parse_from_url(URL)

    async def test_no_llm_configured(
        self, recipes_repo: AsyncMock, scraper: AsyncMock
    ) -> None:
        """Should fail without an LLM client."""
        service = RecipeService(recipes=recipes_repo, scraper=scraper)
        scraper.scrape.side_effect = PageHasNoRecipe("none", html="<p>blog</p>")

        with pytest.raises(RecipeParseError):
            await service.parse_from_url(URL)


class TestDraftFromParsed:
    """Tests for draft_from_parsed."""

    def test_drops_invalid_fields(self) -> None:
        """Should null out values beyond the create limits and keep the rest."""
        draft = draft_from_parsed(
            ParsedRecipe(
                name="Stew",
                cooking_time=5000,
                servings=4,
                image_url="not-a-url",
                source_url=URL,
            )
        )

        assert draft.cooking_time is None
        assert draft.image_url is None
        assert draft.servings == 4
        assert draft.source_url == URL
        assert draft.source == "url_import"

    def test_truncates_long_names(self) -> None:
        draft = draft_from_parsed(ParsedRecipe(name="x" * 300))

        assert len(draft.name) == 255

    def test_drops_invalid_ingredients(self) -> None:
        draft = draft_from_parsed(
            ParsedRecipe(
                name="Stew",
                ingredients=[
                    ParsedIngredient(name="beef"),
                    ParsedIngredient(name="salt", unit="u" * 80),
                ],
            )
        )

        assert [i.name for i in draft.ingredients] == ["beef"]


class TestMealDB:
    """Tests for TheMealDB search and import."""

    async def test_search_unions_and_deduplicates(
        self, service: RecipeService, mealdb: AsyncMock
    ) -> None:
        """Should merge results across ingredients without duplicates."""
        chicken = MealSummary(id_meal="1", str_meal="Chicken Curry")
        rice = MealSummary(id_meal="2", str_meal="Fried Rice")
        mealdb.filter_by_ingredient.side_effect = [[chicken, rice], [rice]]

        meals = await service.search_by_ingredients(["chicken", "rice"])

        assert [m.id_meal for m in meals] == ["1", "2"]

    async def test_search_failure_returns_empty(
        self, service: RecipeService, mealdb: AsyncMock
    ) -> None:
        mealdb.filter_by_ingredient.side_effect = MealDBError("down")

        assert await service.search_by_ingredients(["chicken"]) == []

    async def test_meal_details_failure_returns_none(
        self, service: RecipeService, mealdb: AsyncMock
    ) -> None:
        mealdb.lookup.side_effect = MealDBError("down")

        assert await service.meal_details("52772") is None

    async def test_import_unknown_meal(
        self, service: RecipeService, mealdb: AsyncMock
    ) -> None:
        mealdb.lookup.return_value = None

        with pytest.raises(MealNotFoundError):
            await service.import_from_mealdb(1, "0")

    async def test_import_without_mealdb_client(
        self, recipes_repo: AsyncMock, ingredients_repo: AsyncMock
    ) -> None:
        service = RecipeService(recipes=recipes_repo, ingredients=ingredients_repo)

        with pytest.raises(RecipeSourceUnavailableError):
            await service.import_from_mealdb(1, "52772")

        recipes_repo.create.assert_not_awaited()

    async def test_import_maps_meal_fields(
        self,
        service: RecipeService,
        mealdb: AsyncMock,
        recipes_repo: AsyncMock,
        ingredients_repo: AsyncMock,
    ) -> None:
        """Should map the meal record and keep its id as the external id."""
        mealdb.lookup.return_value = {
            "idMeal": "52772",
            "strMeal": "Teriyaki Chicken Casserole",
            "strInstructions": "Preheat oven.",
            "strMealThumb": "https://www.themealdb.com/images/media/meals/x.jpg",
            "strArea": "Japanese",
            "strCategory": "Chicken",
            "strSource": "",
            "strIngredient1": "soy sauce",
            "strMeasure1": "3/4 cup",
            "strIngredient2": "",
            "strMeasure2": "",
        }

        recipe_id = await service.import_from_mealdb(1, "52772")

        assert recipe_id == 100
        new_recipe = recipes_repo.create.call_args.args[0]
        assert new_recipe.name == "Teriyaki Chicken Casserole"
        assert new_recipe.cuisine == "Japanese"
        assert new_recipe.source == MEALDB_SOURCE
        assert new_recipe.external_id == "52772"
        assert new_recipe.source_url is None
        assert ingredients_repo.add_recipe_ingredient.await_count == 1


class TestRecommendations:
    """Tests for the daily recommendation order."""

    def test_favorites_come_first(self) -> None:
        today = datetime(2026, 1, 1, tzinfo=UTC)
        plain = RecipeFactory.build(id=1, is_favorite=False)
        favorite = RecipeFactory.build(id=2, is_favorite=True)

        ranked = recommendation_order([plain, favorite], today - timedelta(days=1))

        assert {r.id for r in ranked} == {1, 2}
        unrotated = recommendation_order([plain, favorite], datetime(2026, 1, 2, tzinfo=UTC))
        assert unrotated[0].id == 2

    def test_limits_count(self) -> None:
        recipes = [RecipeFactory.build(id=i) for i in range(1, 10)]

        ranked = recommendation_order(recipes, datetime(2026, 5, 1, tzinfo=UTC))

        assert len(ranked) == DAILY_RECOMMENDATION_COUNT

    def test_rotates_by_day(self) -> None:
        """Should start from a different recipe on consecutive days."""
        recipes = [RecipeFactory.build(id=i) for i in range(1, 4)]

        first = recommendation_order(recipes, datetime(2026, 1, 1, tzinfo=UTC))
        second = recommendation_order(recipes, datetime(2026, 1, 2, tzinfo=UTC))

        assert first[0].id != second[0].id

    def test_empty(self) -> None:
        assert recommendation_order([], datetime(2026, 1, 1, tzinfo=UTC)) == []
