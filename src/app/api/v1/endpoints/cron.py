"""HTTP trigger for scheduled jobs."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header, status

from app.api.dependencies import get_cook_nudge_service
from app.core.config import get_settings
from app.core.exceptions import AppException, AuthenticationException
from app.core.security import secure_compare
from app.observability.logging import get_logger
from app.schemas.cron import CookNudgeResponse
from app.services.nudges import CookNudgeService


logger = get_logger(__name__)

router = APIRouter(prefix="/cron", tags=["Cron"])


def verify_cron_secret(
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Require ``Bearer <CRON_SECRET>`` when a secret is configured."""
    secret = get_settings().CRON_SECRET
    if not secret:
        return
    if not authorization or not secure_compare(authorization, f"Bearer {secret}"):
        raise AuthenticationException("Unauthorized")


@router.get(
    "/cook-nudge",
    response_model=CookNudgeResponse,
    summary="Run the cook-nudge job",
    dependencies=[Depends(verify_cron_secret)],
)
async def cook_nudge(
    nudges: Annotated[CookNudgeService, Depends(get_cook_nudge_service)],
) -> CookNudgeResponse:
    try:
        result = await nudges.run()
    except Exception as e:
        logger.opt(exception=e).error("Cook nudge run failed")
        raise AppException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="COOK_NUDGE_FAILED",
            message=str(e),
        ) from None
    return CookNudgeResponse(
        candidates=result.candidates, notifications_sent=result.notifications_sent
    )
