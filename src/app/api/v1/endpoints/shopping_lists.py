"""Shopping list endpoints. Every list is scoped to its owner."""

from __future__ import annotations

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_shopping_list_service
from app.auth.dependencies import UserOrAnonymous
from app.core.exceptions import (
    AuthorizationException,
    NotFoundException,
    ValidationException,
)
from app.schemas.base import IdResponse, SuccessResponse
from app.schemas.shopping_lists import (
    AddFromRecipeRequest,
    AddFromRecipeResponse,
    ExportRequest,
    ExportResponse,
    ShoppingListCreateRequest,
    ShoppingListItemRequest,
    ShoppingListItemResponse,
    ShoppingListResponse,
    ShoppingListUpdateRequest,
    ToggleItemRequest,
)
from app.services.recipes.exceptions import (
    RecipeAccessDeniedError,
    RecipeNotFoundError,
)
from app.services.shopping import ExportFormat, ShoppingListService
from app.services.shopping.exceptions import (
    EmptyUpdateError,
    IngredientNotFoundError,
    ShoppingListAccessDeniedError,
    ShoppingListError,
    ShoppingListItemNotFoundError,
    ShoppingListNotFoundError,
)


router = APIRouter(prefix="/shopping-lists", tags=["Shopping Lists"])

ShoppingLists = Annotated[ShoppingListService, Depends(get_shopping_list_service)]


def raise_shopping_error(e: ShoppingListError) -> NoReturn:
    match e:
        case ShoppingListNotFoundError():
            raise NotFoundException("Shopping list") from None
        case ShoppingListItemNotFoundError():
            raise NotFoundException("Shopping list item") from None
        case IngredientNotFoundError():
            raise NotFoundException("Ingredient", str(e)) from None
        case ShoppingListAccessDeniedError():
            raise AuthorizationException(str(e)) from None
        case EmptyUpdateError():
            raise ValidationException(str(e)) from None
        case _:
            raise ValidationException(str(e)) from None


@router.get("", response_model=list[ShoppingListResponse], summary="List shopping lists")
async def list_lists(
    user: UserOrAnonymous, lists: ShoppingLists
) -> list[ShoppingListResponse]:
    return [ShoppingListResponse.model_validate(s) for s in await lists.list_lists(user.id)]


@router.post(
    "",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a shopping list",
)
async def create_list(
    body: ShoppingListCreateRequest, user: UserOrAnonymous, lists: ShoppingLists
) -> IdResponse:
    return IdResponse(id=await lists.create_list(user.id, body.name, body.description))


@router.get(
    "/{list_id}", response_model=ShoppingListResponse, summary="Get a shopping list"
)
async def get_list(
    list_id: int, user: UserOrAnonymous, lists: ShoppingLists
) -> ShoppingListResponse:
    try:
        return ShoppingListResponse.model_validate(await lists.get_owned(user.id, list_id))
    except ShoppingListError as e:
        raise_shopping_error(e)


@router.patch(
    "/{list_id}", response_model=ShoppingListResponse, summary="Rename or describe a list"
)
async def update_list(
    list_id: int,
    body: ShoppingListUpdateRequest,
    user: UserOrAnonymous,
    lists: ShoppingLists,
) -> ShoppingListResponse:
    try:
        updated = await lists.update_list(
            user.id, list_id, name=body.name, description=body.description
        )
    except ShoppingListError as e:
        raise_shopping_error(e)
    return ShoppingListResponse.model_validate(updated)


@router.delete("/{list_id}", response_model=SuccessResponse, summary="Delete a list")
async def delete_list(
    list_id: int, user: UserOrAnonymous, lists: ShoppingLists
) -> SuccessResponse:
    try:
        await lists.delete_list(user.id, list_id)
    except ShoppingListError as e:
        raise_shopping_error(e)
    return SuccessResponse()


@router.get(
    "/{list_id}/items",
    response_model=list[ShoppingListItemResponse],
    summary="Items with ingredient names",
)
async def list_items(
    list_id: int, user: UserOrAnonymous, lists: ShoppingLists
) -> list[ShoppingListItemResponse]:
    try:
        items = await lists.list_items(user.id, list_id)
    except ShoppingListError as e:
        raise_shopping_error(e)
    return [ShoppingListItemResponse.model_validate(i) for i in items]


@router.post(
    "/{list_id}/items",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an item",
)
async def add_item(
    list_id: int,
    body: ShoppingListItemRequest,
    user: UserOrAnonymous,
    lists: ShoppingLists,
) -> IdResponse:
    try:
        item_id = await lists.add_item(
            user.id, list_id, body.ingredient_id, body.quantity, body.unit
        )
    except ShoppingListError as e:
        raise_shopping_error(e)
    return IdResponse(id=item_id)


@router.patch(
    "/items/{item_id}", response_model=SuccessResponse, summary="Check or uncheck an item"
)
async def toggle_item(
    item_id: int, body: ToggleItemRequest, user: UserOrAnonymous, lists: ShoppingLists
) -> SuccessResponse:
    try:
        await lists.set_item_checked(user.id, item_id, body.is_checked)
    except ShoppingListError as e:
        raise_shopping_error(e)
    return SuccessResponse()


@router.delete(
    "/items/{item_id}", response_model=SuccessResponse, summary="Remove an item"
)
async def remove_item(
    item_id: int, user: UserOrAnonymous, lists: ShoppingLists
) -> SuccessResponse:
    try:
        await lists.remove_item(user.id, item_id)
    except ShoppingListError as e:
        raise_shopping_error(e)
    return SuccessResponse()


@router.post(
    "/{list_id}/from-recipe",
    response_model=AddFromRecipeResponse,
    summary="Copy a recipe's ingredients onto the list",
)
async def add_from_recipe(
    list_id: int,
    body: AddFromRecipeRequest,
    user: UserOrAnonymous,
    lists: ShoppingLists,
) -> AddFromRecipeResponse:
    try:
        added = await lists.add_from_recipe(user.id, list_id, body.recipe_id)
    except ShoppingListError as e:
        raise_shopping_error(e)
    except RecipeNotFoundError:
        raise NotFoundException("Recipe") from None
    except RecipeAccessDeniedError as e:
        raise AuthorizationException(str(e)) from None
    return AddFromRecipeResponse(added=added)


@router.post(
    "/{list_id}/export", response_model=ExportResponse, summary="Export a list"
)
async def export_list(
    list_id: int, body: ExportRequest, user: UserOrAnonymous, lists: ShoppingLists
) -> ExportResponse:
    """Render as csv, txt, md or json."""
    try:
        exported = await lists.export_list(user.id, list_id, ExportFormat(body.format))
    except ShoppingListError as e:
        raise_shopping_error(e)
    return ExportResponse(
        content=exported.content,
        mime_type=exported.mime_type,
        filename=exported.filename,
    )
