"""Ingredient catalog, pantry, image upload and recognition endpoints."""

# Annotations stay evaluated here: the rate-limit decorator wraps endpoints.
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from app.api.dependencies import get_ingredient_service, get_storage_service
from app.auth.dependencies import UserOrAnonymous
from app.cache.rate_limit import rate_limit
from app.core.config import get_settings
from app.core.exceptions import (
    AuthorizationException,
    ExternalServiceException,
    NotFoundException,
    ValidationException,
)
from app.observability.logging import get_logger
from app.schemas.base import IdResponse, SuccessResponse
from app.schemas.ingredients import (
    IngredientCreateRequest,
    IngredientImageRequest,
    IngredientResponse,
    PantryAddRequest,
    PantryItemResponse,
    RecognizeIngredientsRequest,
    RecognizeIngredientsResponse,
    UploadImageRequest,
    UploadImageResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)
from app.services.ingredients import IngredientService
from app.services.ingredients.exceptions import (
    IngredientNotFoundError,
    PantryAccessDeniedError,
    PantryItemNotFoundError,
    RecognitionError,
)
from app.services.storage import StorageService
from app.services.storage.exceptions import InvalidImageDataError, StorageError


logger = get_logger(__name__)

router = APIRouter(prefix="/ingredients", tags=["Ingredients"])

Ingredients = Annotated[IngredientService, Depends(get_ingredient_service)]
Storage = Annotated[StorageService, Depends(get_storage_service)]


@router.get("", response_model=list[IngredientResponse], summary="List ingredients")
async def list_ingredients(ingredients: Ingredients) -> list[IngredientResponse]:
    return [IngredientResponse.model_validate(i) for i in await ingredients.list_ingredients()]


@router.post("", response_model=IngredientResponse, summary="Get or create an ingredient")
async def get_or_create_ingredient(
    body: IngredientCreateRequest, ingredients: Ingredients
) -> IngredientResponse:
    ingredient = await ingredients.get_or_create(body.name, body.category, body.image_url)
    return IngredientResponse.model_validate(ingredient)


@router.patch(
    "/{ingredient_id}/image",
    response_model=IngredientResponse,
    summary="Set an ingredient image",
)
async def update_image(
    ingredient_id: int,
    body: IngredientImageRequest,
    _user: UserOrAnonymous,
    ingredients: Ingredients,
) -> IngredientResponse:
    try:
        ingredient = await ingredients.update_image(ingredient_id, body.image_url)
    except IngredientNotFoundError:
        raise NotFoundException("Ingredient") from None
    return IngredientResponse.model_validate(ingredient)


@router.post(
    "/recognize",
    response_model=RecognizeIngredientsResponse,
    summary="Recognize ingredients in a photo",
    responses={502: {"description": "Vision model failed"}},
)
@rate_limit(get_settings().rate_limiting.llm)
async def recognize(
    request: Request,
    response: Response,
    body: RecognizeIngredientsRequest,
    _user: UserOrAnonymous,
    ingredients: Ingredients,
) -> RecognizeIngredientsResponse:
    try:
        names = await ingredients.recognize_from_image(body.image_url)
    except RecognitionError as e:
        raise ExternalServiceException("LLM", str(e)) from None
    return RecognizeIngredientsResponse(ingredients=names)


@router.post(
    "/upload-url",
    response_model=UploadUrlResponse,
    summary="Presigned URL for a direct image upload",
    responses={503: {"description": "Storage not configured"}},
)
async def create_upload_url(
    body: UploadUrlRequest, _user: UserOrAnonymous, storage: Storage
) -> UploadUrlResponse:
    try:
        upload_url, file_url = await storage.create_upload_url(
            body.file_name, body.content_type
        )
    except StorageError as e:
        raise ExternalServiceException("S3", str(e)) from None
    return UploadUrlResponse(upload_url=upload_url, file_url=file_url)


@router.post(
    "/upload-image",
    response_model=UploadImageResponse,
    summary="Upload base64 image data",
    responses={503: {"description": "Storage not configured"}},
)
async def upload_image(
    body: UploadImageRequest, _user: UserOrAnonymous, storage: Storage
) -> UploadImageResponse:
    try:
        url = await storage.upload_image(body.data, body.file_name, body.content_type)
    except InvalidImageDataError as e:
        raise ValidationException(str(e)) from None
    except StorageError as e:
        raise ExternalServiceException("S3", str(e)) from None
    return UploadImageResponse(url=url)


# -- pantry ------------------------------------------------------------------


@router.get("/pantry", response_model=list[PantryItemResponse], summary="List pantry")
async def list_pantry(
    user: UserOrAnonymous, ingredients: Ingredients
) -> list[PantryItemResponse]:
    return [PantryItemResponse.model_validate(p) for p in await ingredients.list_pantry(user.id)]


@router.post(
    "/pantry",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add to pantry",
)
async def add_to_pantry(
    body: PantryAddRequest, user: UserOrAnonymous, ingredients: Ingredients
) -> IdResponse:
    try:
        item_id = await ingredients.add_to_pantry(
            user.id, body.ingredient_id, body.quantity, body.unit
        )
    except IngredientNotFoundError as e:
        raise NotFoundException("Ingredient", str(e)) from None
    return IdResponse(id=item_id)


@router.delete(
    "/pantry/{item_id}", response_model=SuccessResponse, summary="Remove from pantry"
)
async def remove_from_pantry(
    item_id: int, user: UserOrAnonymous, ingredients: Ingredients
) -> SuccessResponse:
    try:
        await ingredients.remove_from_pantry(user.id, item_id)
    except PantryItemNotFoundError:
        raise NotFoundException("Pantry item") from None
    except PantryAccessDeniedError as e:
        raise AuthorizationException(str(e)) from None
    return SuccessResponse()
