"""Unit tests for Stripe billing endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.database.repositories.billing import SubscriptionStatus
from app.database.repositories.users import User
from app.services.billing.exceptions import (
    NoSubscriptionError,
    StripeRequestError,
    WebhookSignatureError,
)
from app.services.billing.service import CheckoutSession
from tests.factories import SubscriptionFactory


pytestmark = pytest.mark.unit

STRIPE = "/api/v1/stripe"


class TestCheckout:
    """Tests for POST /stripe/create-checkout-session."""

    async def test_uses_origin_header(
        self, client: AsyncClient, billing_service: AsyncMock, user: User
    ) -> None:
        billing_service.create_checkout_session.return_value = CheckoutSession(
            session_id="cs_1", url="https://checkout.stripe.com/c/cs_1"
        )

        response = await client.post(
            f"{STRIPE}/create-checkout-session",
            json={},
            headers={"Origin": "https://app.example.com/"},
        )

        assert response.json() == {
            "sessionId": "cs_1",
            "url": "https://checkout.stripe.com/c/cs_1",
        }
        billing_service.create_checkout_session.assert_awaited_once_with(
            user,
            "https://app.example.com",
            price_id=None,
            success_url=None,
            cancel_url=None,
        )

    async def test_stripe_failure(self, client: AsyncClient, billing_service: AsyncMock) -> None:
        billing_service.create_checkout_session.side_effect = StripeRequestError("card_error")

        response = await client.post(f"{STRIPE}/create-checkout-session", json={})

        assert response.status_code == 502

    async def test_not_configured(
        self, client: AsyncClient, billing_service: AsyncMock
    ) -> None:
        """Should answer 503 when Stripe keys are missing."""
        billing_service.is_configured = False

        response = await client.post(f"{STRIPE}/create-checkout-session", json={})

        assert response.status_code == 503


class TestPortal:
    async def test_portal(self, client: AsyncClient, billing_service: AsyncMock) -> None:
        billing_service.create_portal_session.return_value = "https://billing.stripe.com/p/1"

        response = await client.post(f"{STRIPE}/customer-portal")

        assert response.json() == {"url": "https://billing.stripe.com/p/1"}

    async def test_no_subscription(
        self, client: AsyncClient, billing_service: AsyncMock
    ) -> None:
        billing_service.create_portal_session.side_effect = NoSubscriptionError(
            "No subscription found"
        )

        response = await client.post(f"{STRIPE}/customer-portal")

        assert response.status_code == 404


class TestWebhook:
    """Tests for POST /stripe/webhook."""

    async def test_passes_raw_body_and_signature(
        self, client: AsyncClient, billing_service: AsyncMock
    ) -> None:
        payload = b'{"id": "evt_1", "type": "invoice.paid"}'

        response = await client.post(
            f"{STRIPE}/webhook",
            content=payload,
            headers={"stripe-signature": "t=1,v1=abc"},
        )

        assert response.json() == {"received": True}
        billing_service.handle_webhook.assert_awaited_once_with(payload, "t=1,v1=abc")

    async def test_bad_signature(self, client: AsyncClient, billing_service: AsyncMock) -> None:
        billing_service.handle_webhook.side_effect = WebhookSignatureError(
            "Missing stripe-signature header"
        )

        response = await client.post(f"{STRIPE}/webhook", content=b"{}")

        assert response.status_code == 400
        assert response.json()["message"] == "Missing stripe-signature header"

    async def test_handler_failure(
        self, client: AsyncClient, billing_service: AsyncMock
    ) -> None:
        billing_service.handle_webhook.side_effect = RuntimeError("db down")

        response = await client.post(
            f"{STRIPE}/webhook", content=b"{}", headers={"stripe-signature": "sig"}
        )

        assert response.status_code == 500
        assert response.json()["error"] == "WEBHOOK_ERROR"


class TestSubscription:
    async def test_active(self, client: AsyncClient, billing_service: AsyncMock) -> None:
        billing_service.get_subscription.return_value = SubscriptionFactory.build(
            id=1, status=SubscriptionStatus.ACTIVE
        )

        response = await client.get(f"{STRIPE}/subscription")

        body = response.json()
        assert body["status"] == "active"
        assert body["isPremium"] is True

    async def test_none(self, client: AsyncClient, billing_service: AsyncMock) -> None:
        billing_service.get_subscription.return_value = None

        response = await client.get(f"{STRIPE}/subscription")

        assert response.json() is None
