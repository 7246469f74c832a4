"""Subscription and payment repository."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel

from app.database.repositories.base import BaseRepository


if TYPE_CHECKING:
    from asyncpg import Record


class SubscriptionStatus(StrEnum):
    """Stripe subscription statuses stored locally."""

    ACTIVE = "active"
    CANCELED = "canceled"
    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    PAST_DUE = "past_due"
    TRIALING = "trialing"
    UNPAID = "unpaid"
    PAUSED = "paused"


class PaymentStatus(StrEnum):
    """Local payment outcome."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"


class Subscription(BaseModel):
    """A user's subscription row."""

    id: int
    user_id: int
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    stripe_price_id: str | None = None
    status: SubscriptionStatus = SubscriptionStatus.INCOMPLETE
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    cancel_at_period_end: bool = False
    canceled_at: datetime | None = None
    trial_start: datetime | None = None
    trial_end: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_premium(self) -> bool:
        return self.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)


class SubscriptionSync(BaseModel):
    """Subscription state mirrored from Stripe."""

    stripe_subscription_id: str
    stripe_price_id: str | None = None
    status: SubscriptionStatus
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    cancel_at_period_end: bool = False
    canceled_at: datetime | None = None
    trial_start: datetime | None = None
    trial_end: datetime | None = None


class NewPayment(BaseModel):
    """A payment recorded from an invoice event."""

    user_id: int
    stripe_payment_intent_id: str
    stripe_charge_id: str | None = None
    amount: int
    currency: str
    status: PaymentStatus
    description: str | None = None
    metadata: dict[str, Any] | None = None


class BillingRepository(BaseRepository):
    """Data access for ``subscriptions`` and ``payments``."""

    async def get_subscription_by_user(self, user_id: int) -> Subscription | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM subscriptions WHERE user_id = $1", user_id
            )
        return self._row_to_subscription(row) if row else None

    async def get_subscription_by_customer(self, customer_id: str) -> Subscription | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM subscriptions WHERE stripe_customer_id = $1", customer_id
            )
        return self._row_to_subscription(row) if row else None

    async def get_subscription_by_stripe_id(
        self, stripe_subscription_id: str
    ) -> Subscription | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM subscriptions WHERE stripe_subscription_id = $1",
                stripe_subscription_id,
            )
        return self._row_to_subscription(row) if row else None

    async def upsert_customer(
        self,
        user_id: int,
        stripe_customer_id: str,
        status: SubscriptionStatus = SubscriptionStatus.INCOMPLETE,
    ) -> None:
        """Record the Stripe customer for a user."""
        query = """
            INSERT INTO subscriptions (user_id, stripe_customer_id, status)
            VALUES ($1, $2, $3)
            ON CONFLICT (user_id) DO UPDATE SET
                stripe_customer_id = EXCLUDED.stripe_customer_id,
                updated_at = now()
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query, user_id, stripe_customer_id, status.value)

    async def sync_by_customer(
        self, customer_id: str, sync: SubscriptionSync
    ) -> Subscription | None:
        """Mirror Stripe state onto the customer's row; ``None`` if there is no row."""
        query = """
            UPDATE subscriptions SET
                stripe_subscription_id = $2,
                stripe_price_id = COALESCE($3, stripe_price_id),
                status = $4,
                current_period_start = $5,
                current_period_end = $6,
                cancel_at_period_end = $7,
                canceled_at = $8,
                trial_start = $9,
                trial_end = $10,
                updated_at = now()
            WHERE stripe_customer_id = $1
            RETURNING *
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query,
                customer_id,
                sync.stripe_subscription_id,
                sync.stripe_price_id,
                sync.status.value,
                sync.current_period_start,
                sync.current_period_end,
                sync.cancel_at_period_end,
                sync.canceled_at,
                sync.trial_start,
                sync.trial_end,
            )
        return self._row_to_subscription(row) if row else None

    async def mark_canceled(self, stripe_subscription_id: str) -> None:
        query = """
            UPDATE subscriptions SET
                status = 'canceled',
                canceled_at = now(),
                cancel_at_period_end = false,
                updated_at = now()
            WHERE stripe_subscription_id = $1
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query, stripe_subscription_id)

    async def create_payment(self, payment: NewPayment) -> None:
        """Insert a payment; a replayed payment intent is ignored."""
        query = """
            INSERT INTO payments (
                user_id, stripe_payment_intent_id, stripe_charge_id, amount,
                currency, status, description, metadata
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            ON CONFLICT (stripe_payment_intent_id) DO NOTHING
        """
        async with self.pool.acquire() as conn:
            await conn.execute(
                query,
                payment.user_id,
                payment.stripe_payment_intent_id,
                payment.stripe_charge_id,
                payment.amount,
                payment.currency,
                payment.status.value,
                payment.description,
                orjson.dumps(payment.metadata).decode() if payment.metadata else None,
            )

    @staticmethod
    def _row_to_subscription(row: Record) -> Subscription:
        data = dict(row)
        if data.get("status") not in SubscriptionStatus:
            data["status"] = SubscriptionStatus.INCOMPLETE
        return Subscription.model_validate(data)
