"""Cook-nudge push reminders for saved but uncooked recipes."""

from app.services.nudges.service import CookNudgeResult, CookNudgeService


__all__ = ["CookNudgeResult", "CookNudgeService"]
