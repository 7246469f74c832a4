"""Unit tests for CookNudgeService."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from freezegun import freeze_time

from app.database.repositories.recipes import NudgeCandidate
from app.services.nudges.service import (
    NUDGE_SCREEN,
    NUDGE_TITLE,
    CookNudgeService,
    nudge_body,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def push_client() -> AsyncMock:
    client = AsyncMock()
    client.send.return_value = True
    return client


@pytest.fixture
def recipes() -> AsyncMock:
    repo = AsyncMock()
    repo.list_nudge_candidates.return_value = []
    return repo


@pytest.fixture
def push_tokens() -> AsyncMock:
    repo = AsyncMock()
    repo.list_tokens.return_value = []
    return repo


@pytest.fixture
def service(
    push_client: AsyncMock, recipes: AsyncMock, push_tokens: AsyncMock
) -> CookNudgeService:
    return CookNudgeService(push_client, recipes=recipes, push_tokens=push_tokens)


class TestCutoff:
    """Tests for the candidate age cutoff."""

    def test_subtracts_min_age(self, service: CookNudgeService) -> None:
        """Should go back the configured number of days."""
        now = datetime(2026, 3, 10, 12, tzinfo=UTC)
        days = service.settings.cron.cook_nudge.min_age_days

        assert service.cutoff(now) == now - timedelta(days=days)

    @freeze_time("2026-03-10 12:00:00")
    def test_defaults_to_now(self, service: CookNudgeService) -> None:
        """Should use the current time when none is given."""
        days = service.settings.cron.cook_nudge.min_age_days

        assert service.cutoff() == datetime(2026, 3, 10, 12, tzinfo=UTC) - timedelta(
            days=days
        )


class TestRun:
    """Tests for a nudge run."""

    async def test_no_candidates(
        self, service: CookNudgeService, push_client: AsyncMock
    ) -> None:
        """Should report zero and send nothing."""
        result = await service.run()

        assert result.candidates == 0
        assert result.notifications_sent == 0
        push_client.send.assert_not_awaited()

    async def test_sends_to_every_device_and_marks_recipe(
        self,
        service: CookNudgeService,
        recipes: AsyncMock,
        push_tokens: AsyncMock,
        push_client: AsyncMock,
    ) -> None:
        """Should push once per token and mark the recipe nudged."""
        recipes.list_nudge_candidates.return_value = [
            NudgeCandidate(id=10, user_id=1, name="Shakshuka")
        ]
        push_tokens.list_tokens.return_value = ["ExponentPushToken[a]", "ExponentPushToken[b]"]

        result = await service.run()

        assert result.candidates == 1
        assert result.notifications_sent == 2
        push_client.send.assert_any_await(
            "ExponentPushToken[a]",
            NUDGE_TITLE,
            nudge_body("Shakshuka"),
            {"recipeId": "10", "screen": NUDGE_SCREEN},
        )
        recipes.mark_nudge_sent.assert_awaited_once_with(10)

    async def test_marks_recipe_without_devices(
        self, service: CookNudgeService, recipes: AsyncMock, push_client: AsyncMock
    ) -> None:
        """Should still mark the recipe so it is not picked up again."""
        recipes.list_nudge_candidates.return_value = [
            NudgeCandidate(id=11, user_id=3, name="Dal")
        ]

        result = await service.run()

        assert result.notifications_sent == 0
        push_client.send.assert_not_awaited()
        recipes.mark_nudge_sent.assert_awaited_once_with(11)

    async def test_counts_rejected_sends(
        self,
        service: CookNudgeService,
        recipes: AsyncMock,
        push_tokens: AsyncMock,
        push_client: AsyncMock,
    ) -> None:
        """Should count a send even when the push service rejects it."""
        recipes.list_nudge_candidates.return_value = [
            NudgeCandidate(id=12, user_id=1, name="Pho")
        ]
        push_tokens.list_tokens.return_value = ["ExponentPushToken[a]"]
        push_client.send.return_value = False

        result = await service.run()

        assert result.notifications_sent == 1


def test_nudge_body_names_recipe() -> None:
    """Should quote the recipe name."""
    assert '"Pho"' in nudge_body("Pho")
