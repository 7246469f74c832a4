"""Expo push notification client.

Delivery is best effort: failures are logged and reported as ``False``,
never raised.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import Field

from app.core.config import get_settings
from app.observability.logging import get_logger
from app.observability.metrics import record_push_notification
from app.schemas.base import DownstreamRequest


logger = get_logger(__name__)


class PushMessage(DownstreamRequest):
    """Body of one Expo push message."""

    to: str
    title: str
    body: str
    sound: str = "default"
    data: dict[str, Any] = Field(default_factory=dict)


class PushClient:
    def __init__(self) -> None:
        self._settings = get_settings()
        self._http_client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._settings.push.timeout),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
        )
        logger.info("PushClient initialized")

    async def shutdown(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> bool:
        """Send one notification; returns whether Expo accepted it."""
        if self._http_client is None:
            await self.initialize()
        assert self._http_client is not None

        message = PushMessage(to=token, title=title, body=body, data=data or {})
        try:
            response = await self._http_client.post(
                self._settings.push.url, json=message.model_dump()
            )
        except httpx.RequestError as e:
            logger.warning("Push notification request failed", error=str(e))
            record_push_notification(success=False)
            return False

        if not response.is_success:
            logger.warning(
                "Push notification rejected",
                status_code=response.status_code,
                body=response.text[:500],
            )
            record_push_notification(success=False)
            return False

        record_push_notification(success=True)
        return True
