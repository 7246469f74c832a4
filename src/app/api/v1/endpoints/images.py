"""Recipe image proxy endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.dependencies import get_image_proxy
from app.core.exceptions import (
    ExternalServiceException,
    NotFoundException,
    ValidationException,
)
from app.services.images import RecipeImageProxy
from app.services.images.exceptions import (
    ImageFetchError,
    ImageNotFoundError,
    InvalidRecipeIdError,
)
from app.services.images.service import CACHE_CONTROL


router = APIRouter(tags=["Images"])


@router.get(
    "/recipe-image/{recipe_id}",
    summary="Proxy a recipe's image",
    response_class=Response,
    responses={
        200: {"content": {"image/*": {}}},
        400: {"description": "Invalid recipe ID"},
        404: {"description": "No image"},
        502: {"description": "Upstream fetch failed"},
    },
)
async def recipe_image(
    recipe_id: str,
    proxy: Annotated[RecipeImageProxy, Depends(get_image_proxy)],
) -> Response:
    try:
        image = await proxy.fetch(recipe_id)
    except InvalidRecipeIdError as e:
        raise ValidationException(str(e)) from None
    except ImageNotFoundError as e:
        raise NotFoundException("Image", str(e)) from None
    except ImageFetchError as e:
        raise ExternalServiceException("image host", str(e)) from None
    return Response(
        content=image.content,
        media_type=image.content_type,
        headers={"Cache-Control": CACHE_CONTROL},
    )
