"""Cook-nudge job.

Finds recipes saved a few days ago that were never cooked, sends one push
per device of the owner and marks each recipe so it is nudged only once.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from app.core.config import get_settings
from app.database.repositories.notifications import PushTokenRepository
from app.database.repositories.recipes import NudgeCandidate, RecipeRepository
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from app.services.notifications.push import PushClient


logger = get_logger(__name__)

NUDGE_TITLE = "Haven't cooked yet?"
NUDGE_SCREEN = "RecipeDetail"


def nudge_body(recipe_name: str) -> str:
    return f'Make "{recipe_name}" today, you saved it a few days ago.'


@dataclass(frozen=True)
class CookNudgeResult:
    candidates: int
    notifications_sent: int


class CookNudgeService:
    def __init__(
        self,
        push_client: PushClient,
        recipes: RecipeRepository | None = None,
        push_tokens: PushTokenRepository | None = None,
    ) -> None:
        self.settings = get_settings()
        self._push_client = push_client
        self._recipes = recipes or RecipeRepository()
        self._push_tokens = push_tokens or PushTokenRepository()

    def cutoff(self, now: datetime | None = None) -> datetime:
        now = now or datetime.now(UTC)
        return now - timedelta(days=self.settings.cron.cook_nudge.min_age_days)

    async def _nudge(self, candidate: NudgeCandidate) -> int:
        tokens = await self._push_tokens.list_tokens(candidate.user_id)
        sent = 0
        for token in tokens:
            await self._push_client.send(
                token,
                NUDGE_TITLE,
                nudge_body(candidate.name),
                {"recipeId": str(candidate.id), "screen": NUDGE_SCREEN},
            )
            sent += 1
        await self._recipes.mark_nudge_sent(candidate.id)
        return sent

    async def run(self) -> CookNudgeResult:
        """Nudge every eligible recipe once.

        Every attempted send is counted, accepted or not.
        """
        candidates = await self._recipes.list_nudge_candidates(self.cutoff())
        sent = 0
        for candidate in candidates:
            sent += await self._nudge(candidate)

        logger.info(
            "Cook nudge run complete",
            candidates=len(candidates),
            notifications_sent=sent,
        )
        return CookNudgeResult(candidates=len(candidates), notifications_sent=sent)
