"""Stripe billing schemas."""

from __future__ import annotations

from datetime import datetime

from app.schemas.base import APIRequest, APIResponse
from app.schemas.types import LongHttpUrlStr


class CheckoutRequest(APIRequest):
    price_id: str | None = None
    success_url: LongHttpUrlStr | None = None
    cancel_url: LongHttpUrlStr | None = None


class CheckoutResponse(APIResponse):
    session_id: str
    url: str | None = None


class PortalResponse(APIResponse):
    url: str


class WebhookResponse(APIResponse):
    received: bool = True


class SubscriptionResponse(APIResponse):
    id: int
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    stripe_price_id: str | None = None
    status: str
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    cancel_at_period_end: bool
    canceled_at: datetime | None = None
    trial_start: datetime | None = None
    trial_end: datetime | None = None
    is_premium: bool
