"""Recipe endpoints.

Provides CRUD for the caller's recipes plus three import paths: a zip
archive of JSON recipes, a recipe web page and TheMealDB.
"""

# Annotations stay evaluated here: the rate-limit decorator wraps endpoints.
from typing import Annotated, Any, NoReturn

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status

from app.api.dependencies import get_recipe_service
from app.auth.dependencies import UserOrAnonymous
from app.cache.rate_limit import rate_limit
from app.core.config import get_settings
from app.core.exceptions import (
    AuthorizationException,
    ExternalServiceException,
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
)
from app.observability.logging import get_logger
from app.schemas.base import IdResponse, SuccessResponse
from app.schemas.recipes import (
    FavoriteRequest,
    ImportZipResponse,
    IngredientSearchRequest,
    MealImportRequest,
    MealSummaryResponse,
    ParsedRecipeResponse,
    ParseUrlRequest,
    ParseUrlResponse,
    RecipeCreateRequest,
    RecipeIngredientResponse,
    RecipeResponse,
)
from app.services.mealdb.exceptions import MealDBError
from app.services.recipes import RecipeService
from app.services.recipes.exceptions import (
    MealNotFoundError,
    RecipeAccessDeniedError,
    RecipeError,
    RecipeImportError,
    RecipeNotFoundError,
    RecipeParseError,
    RecipeSourceUnavailableError,
)
from app.services.scraping.exceptions import ScrapingError, UnsupportedURLError


logger = get_logger(__name__)

router = APIRouter(prefix="/recipes", tags=["Recipes"])

Recipes = Annotated[RecipeService, Depends(get_recipe_service)]


def raise_recipe_error(e: RecipeError) -> NoReturn:
    """Translate a recipe service error into its HTTP error."""
    match e:
        case RecipeNotFoundError():
            raise NotFoundException("Recipe") from None
        case RecipeAccessDeniedError():
            raise AuthorizationException(str(e)) from None
        case MealNotFoundError():
            raise NotFoundException("Meal") from None
        case RecipeParseError():
            raise ExternalServiceException("recipe parser", str(e)) from None
        case RecipeSourceUnavailableError():
            raise ServiceUnavailableException(str(e)) from None
        case _:
            raise ValidationException(str(e)) from None


@router.get("", response_model=list[RecipeResponse], summary="List recipes")
async def list_recipes(user: UserOrAnonymous, recipes: Recipes) -> list[RecipeResponse]:
    """The caller's recipes, newest first."""
    return [RecipeResponse.model_validate(r) for r in await recipes.list_recipes(user.id)]


@router.post(
    "",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a recipe",
)
async def create_recipe(
    body: RecipeCreateRequest, user: UserOrAnonymous, recipes: Recipes
) -> IdResponse:
    return IdResponse(id=await recipes.create_recipe(user.id, body))


@router.get(
    "/recommendations/daily",
    response_model=list[RecipeResponse],
    summary="Today's recipe picks",
)
async def daily_recommendations(
    user: UserOrAnonymous, recipes: Recipes
) -> list[RecipeResponse]:
    """Up to five recipes: favorites, then least recently cooked, rotated daily."""
    picks = await recipes.daily_recommendations(user.id)
    return [RecipeResponse.model_validate(r) for r in picks]


@router.post(
    "/import/zip",
    response_model=ImportZipResponse,
    summary="Import recipes from a zip archive",
    responses={400: {"description": "Invalid archive or recipe"}},
)
async def import_zip(
    user: UserOrAnonymous,
    recipes: Recipes,
    file: Annotated[UploadFile, File(description="Zip of *.json recipes")],
) -> ImportZipResponse:
    archive = await file.read()
    try:
        imported = await recipes.import_zip(user.id, archive)
    except RecipeImportError as e:
        logger.warning("Zip import rejected", error=str(e))
        raise ValidationException(str(e)) from None
    return ImportZipResponse(imported=imported)


@router.post(
    "/parse-url",
    response_model=ParseUrlResponse,
    summary="Parse a recipe web page",
    responses={
        400: {"description": "URL not allowed"},
        502: {"description": "Page could not be fetched or parsed"},
    },
)
@rate_limit(get_settings().rate_limiting.llm)
async def parse_url(
    request: Request,
    response: Response,
    body: ParseUrlRequest,
    user: UserOrAnonymous,
    recipes: Recipes,
) -> ParseUrlResponse:
    """Scrape the page, falling back to the LLM; optionally save the result."""
    try:
        parsed = await recipes.parse_from_url(body.url)
    except UnsupportedURLError as e:
        raise ValidationException(str(e)) from None
    except ScrapingError as e:
        logger.warning("Recipe page fetch failed", url=body.url, error=str(e))
        raise ExternalServiceException(
            "recipe page", "Failed to parse recipe from URL"
        ) from None
    except RecipeError as e:
        logger.warning("Recipe parse failed", url=body.url, error=str(e))
        raise_recipe_error(e)

    if body.auto_save:
        return ParseUrlResponse(id=await recipes.save_parsed(user.id, parsed))
    return ParseUrlResponse(
        parsed=ParsedRecipeResponse.model_validate(parsed.model_dump())
    )


@router.post(
    "/search/by-ingredients",
    response_model=list[MealSummaryResponse],
    summary="Search TheMealDB by ingredients",
)
async def search_by_ingredients(
    body: IngredientSearchRequest, recipes: Recipes
) -> list[MealSummaryResponse]:
    meals = await recipes.search_by_ingredients(body.ingredients)
    return [MealSummaryResponse.model_validate(m) for m in meals]


@router.get("/mealdb/{meal_id}", summary="TheMealDB meal details")
async def meal_details(meal_id: str, recipes: Recipes) -> dict[str, Any] | None:
    """The raw TheMealDB record, or ``null`` on a miss or upstream failure."""
    if not 1 <= len(meal_id) <= 20:
        raise ValidationException("mealId must be 1-20 characters")
    return await recipes.meal_details(meal_id)


@router.post(
    "/import/mealdb",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import a TheMealDB meal",
)
async def import_from_mealdb(
    body: MealImportRequest, user: UserOrAnonymous, recipes: Recipes
) -> IdResponse:
    try:
        recipe_id = await recipes.import_from_mealdb(user.id, body.meal_id)
    except MealDBError as e:
        logger.warning("TheMealDB import failed", meal_id=body.meal_id, error=str(e))
        raise ExternalServiceException("TheMealDB") from None
    except RecipeError as e:
        raise_recipe_error(e)
    return IdResponse(id=recipe_id)


@router.get("/{recipe_id}", response_model=RecipeResponse, summary="Get a recipe")
async def get_recipe(
    recipe_id: int, user: UserOrAnonymous, recipes: Recipes
) -> RecipeResponse:
    try:
        return RecipeResponse.model_validate(await recipes.get_owned(user.id, recipe_id))
    except RecipeError as e:
        raise_recipe_error(e)


@router.get(
    "/{recipe_id}/ingredients",
    response_model=list[RecipeIngredientResponse],
    summary="A recipe's ingredients",
)
async def recipe_ingredients(
    recipe_id: int, user: UserOrAnonymous, recipes: Recipes
) -> list[RecipeIngredientResponse]:
    try:
        rows = await recipes.list_ingredients(user.id, recipe_id)
    except RecipeError as e:
        raise_recipe_error(e)
    return [RecipeIngredientResponse.model_validate(r) for r in rows]


@router.patch(
    "/{recipe_id}/favorite", response_model=SuccessResponse, summary="Toggle favorite"
)
async def set_favorite(
    recipe_id: int, body: FavoriteRequest, user: UserOrAnonymous, recipes: Recipes
) -> SuccessResponse:
    try:
        await recipes.set_favorite(user.id, recipe_id, body.is_favorite)
    except RecipeError as e:
        raise_recipe_error(e)
    return SuccessResponse()


@router.post(
    "/{recipe_id}/cooked", response_model=RecipeResponse, summary="Mark as cooked"
)
async def mark_cooked(
    recipe_id: int, user: UserOrAnonymous, recipes: Recipes
) -> RecipeResponse:
    try:
        return RecipeResponse.model_validate(await recipes.mark_cooked(user.id, recipe_id))
    except RecipeError as e:
        raise_recipe_error(e)


@router.delete("/{recipe_id}", response_model=SuccessResponse, summary="Delete a recipe")
async def delete_recipe(
    recipe_id: int, user: UserOrAnonymous, recipes: Recipes
) -> SuccessResponse:
    try:
        await recipes.delete_recipe(user.id, recipe_id)
    except RecipeError as e:
        raise_recipe_error(e)
    return SuccessResponse()
