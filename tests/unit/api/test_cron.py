"""Unit tests for the cron trigger endpoint."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.services.nudges.service import CookNudgeResult


pytestmark = pytest.mark.unit

COOK_NUDGE = "/api/v1/cron/cook-nudge"


class TestCookNudge:
    """Tests for GET /cron/cook-nudge."""

    async def test_open_without_secret(
        self, client: AsyncClient, cook_nudge_service: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CRON_SECRET", raising=False)
        cook_nudge_service.run.return_value = CookNudgeResult(candidates=3, notifications_sent=3)

        response = await client.get(COOK_NUDGE)

        assert response.json() == {"ok": True, "candidates": 3, "notificationsSent": 3}

    async def test_requires_bearer_secret(
        self, client: AsyncClient, cook_nudge_service: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CRON_SECRET", "s3cret")

        response = await client.get(COOK_NUDGE, headers={"Authorization": "Bearer wrong"})

        assert response.status_code == 401
        cook_nudge_service.run.assert_not_awaited()

    async def test_accepts_bearer_secret(
        self, client: AsyncClient, cook_nudge_service: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CRON_SECRET", "s3cret")
        cook_nudge_service.run.return_value = CookNudgeResult(candidates=0, notifications_sent=0)

        response = await client.get(COOK_NUDGE, headers={"Authorization": "Bearer s3cret"})

        assert response.status_code == 200

    async def test_run_failure(
        self, client: AsyncClient, cook_nudge_service: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CRON_SECRET", raising=False)
        cook_nudge_service.run.side_effect = RuntimeError("pool closed")

        response = await client.get(COOK_NUDGE)

        assert response.status_code == 500
        assert response.json()["error"] == "COOK_NUDGE_FAILED"
