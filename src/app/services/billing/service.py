"""Stripe billing: checkout, customer portal and webhook sync.

Subscription state is mirrored locally from webhook events. Checkout only
creates the Stripe customer and the session; the subscription row is
filled in once Stripe reports back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import stripe

from app.core.config import get_settings
from app.database.repositories.billing import (
    BillingRepository,
    NewPayment,
    PaymentStatus,
    Subscription,
    SubscriptionStatus,
    SubscriptionSync,
)
from app.observability.logging import get_logger
from app.services.billing.exceptions import (
    BillingNotConfiguredError,
    NoSubscriptionError,
    StripeRequestError,
    WebhookSignatureError,
)


if TYPE_CHECKING:
    from app.database.repositories.users import User


logger = get_logger(__name__)

CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str | None


def map_subscription_status(value: str | None) -> SubscriptionStatus:
    """Map a Stripe status string; unknown values become ``incomplete``."""
    try:
        return SubscriptionStatus(value or "")
    except ValueError:
        return SubscriptionStatus.INCOMPLETE


def _timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=UTC)


def _first_item(subscription: Any) -> Any:
    items = (subscription.get("items") or {}).get("data") or []
    return items[0] if items else None


def subscription_sync_from_stripe(subscription: Any) -> SubscriptionSync:
    """Build the local sync payload from a Stripe subscription object.

    Newer API versions report the billing period on the subscription item
    instead of the subscription itself, so both are checked.
    """
    item = _first_item(subscription) or {}
    price = item.get("price") or {}
    now = datetime.now(UTC)

    period_start = subscription.get("current_period_start") or item.get(
        "current_period_start"
    )
    period_end = subscription.get("current_period_end") or item.get(
        "current_period_end"
    )

    return SubscriptionSync(
        stripe_subscription_id=subscription["id"],
        stripe_price_id=price.get("id"),
        status=map_subscription_status(subscription.get("status")),
        current_period_start=_timestamp(period_start) or now,
        current_period_end=_timestamp(period_end) or now,
        cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
        canceled_at=_timestamp(subscription.get("canceled_at")),
        trial_start=_timestamp(subscription.get("trial_start")),
        trial_end=_timestamp(subscription.get("trial_end")),
    )


def _as_dict(obj: Any) -> dict[str, Any]:
    """Plain-dict view of a Stripe object; newer SDKs no longer subclass ``dict``."""
    if isinstance(obj, dict):
        return obj
    return obj.to_dict()


def _stripe_id(value: Any) -> str | None:
    """Return an id from either an expanded object or a bare id string."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return value.get("id")


class BillingService:
    """Checkout, portal and webhook handling on top of ``BillingRepository``."""

    def __init__(
        self,
        billing: BillingRepository | None = None,
        client: stripe.StripeClient | None = None,
    ) -> None:
        self.settings = get_settings()
        self._billing = billing or BillingRepository()
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.settings.STRIPE_SECRET_KEY)

    @property
    def client(self) -> stripe.StripeClient:
        if self._client is None:
            if not self.settings.STRIPE_SECRET_KEY:
                msg = "Stripe is not configured"
                raise BillingNotConfiguredError(msg)
            self._client = stripe.StripeClient(
                self.settings.STRIPE_SECRET_KEY,
                stripe_version=self.settings.stripe.api_version,
                http_client=stripe.HTTPXClient(),
            )
        return self._client

    def resolve_price_id(self, price_id: str | None) -> str:
        """Given price, else the configured default, else Premium Monthly."""
        resolved = (
            price_id
            or self.settings.stripe.default_price_id
            or self.settings.stripe.prices.premium_monthly
        )
        if not resolved:
            msg = "No Stripe price configured"
            raise BillingNotConfiguredError(msg)
        return resolved

    def checkout_mode(self, price_id: str) -> str:
        return "payment" if price_id in self.settings.lifetime_price_ids else "subscription"

    async def get_subscription(self, user_id: int) -> Subscription | None:
        return await self._billing.get_subscription_by_user(user_id)

    async def _ensure_customer(self, user: User) -> str:
        existing = await self._billing.get_subscription_by_user(user.id)
        if existing and existing.stripe_customer_id:
            return existing.stripe_customer_id

        params: dict[str, Any] = {
            "metadata": {"userId": str(user.id), "openId": user.open_id},
        }
        if user.email:
            params["email"] = user.email
        if user.name:
            params["name"] = user.name
        customer = await self.client.customers.create_async(params=params)
        await self._billing.upsert_customer(
            user.id, customer.id, SubscriptionStatus.INCOMPLETE
        )
        logger.info("Stripe customer created", user_id=user.id, customer_id=customer.id)
        return customer.id

    async def create_checkout_session(
        self,
        user: User,
        origin: str,
        *,
        price_id: str | None = None,
        success_url: str | None = None,
        cancel_url: str | None = None,
    ) -> CheckoutSession:
        """Create a Checkout session for ``user``.

        Raises:
            BillingNotConfiguredError: No secret key or no price available.
            StripeRequestError: Stripe rejected a request.
        """
        price = self.resolve_price_id(price_id)
        mode = self.checkout_mode(price)
        origin = origin.rstrip("/")

        try:
            customer_id = await self._ensure_customer(user)
            params: dict[str, Any] = {
                "customer": customer_id,
                "mode": mode,
                "payment_method_types": ["card"],
                "line_items": [{"price": price, "quantity": 1}],
                "success_url": success_url
                or f"{origin}/settings?session_id={CHECKOUT_SESSION_PLACEHOLDER}",
                "cancel_url": cancel_url or f"{origin}/settings",
                "metadata": {"userId": str(user.id)},
            }
            if mode == "subscription":
                params["subscription_data"] = {"metadata": {"userId": str(user.id)}}
            session = await self.client.checkout.sessions.create_async(params=params)
        except stripe.StripeError as e:
            logger.warning("Stripe checkout failed", user_id=user.id, error=str(e))
            msg = "Failed to create checkout session"
            raise StripeRequestError(msg) from e

        logger.info("Checkout session created", user_id=user.id, mode=mode)
        return CheckoutSession(session_id=session.id, url=session.url)

    async def create_portal_session(self, user_id: int, origin: str) -> str:
        """Return a billing portal URL.

        Raises:
            NoSubscriptionError: The user has no Stripe customer.
        """
        existing = await self._billing.get_subscription_by_user(user_id)
        if existing is None or not existing.stripe_customer_id:
            msg = "No subscription found"
            raise NoSubscriptionError(msg)

        try:
            session = await self.client.billing_portal.sessions.create_async(
                params={
                    "customer": existing.stripe_customer_id,
                    "return_url": f"{origin.rstrip('/')}/settings",
                }
            )
        except stripe.StripeError as e:
            logger.warning("Stripe portal failed", user_id=user_id, error=str(e))
            msg = "Failed to create portal session"
            raise StripeRequestError(msg) from e
        return session.url

    def construct_event(self, payload: bytes, signature: str | None) -> stripe.Event:
        """Verify and parse a webhook payload.

        Raises:
            WebhookSignatureError: Missing signature or secret, or bad signature.
        """
        secret = self.settings.STRIPE_WEBHOOK_SECRET
        if not signature or not secret:
            msg = "Missing signature or webhook secret"
            raise WebhookSignatureError(msg)
        try:
            return stripe.Webhook.construct_event(payload, signature, secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            msg = f"Webhook signature verification failed: {e}"
            raise WebhookSignatureError(msg) from e

    async def handle_webhook(self, payload: bytes, signature: str | None) -> None:
        """Verify the event and apply it to local subscription state."""
        event = _as_dict(self.construct_event(payload, signature))
        await self.dispatch_event(event["type"], event["data"]["object"])

    async def dispatch_event(self, event_type: str, obj: Any) -> None:
        logger.info("Stripe webhook received", event_type=event_type)
        match event_type:
            case "checkout.session.completed":
                await self._on_checkout_completed(obj)
            case "customer.subscription.created" | "customer.subscription.updated":
                await self._sync_subscription(obj)
            case "customer.subscription.deleted":
                await self._billing.mark_canceled(obj["id"])
            case "invoice.payment_succeeded":
                await self._record_invoice(obj, succeeded=True)
            case "invoice.payment_failed":
                await self._record_invoice(obj, succeeded=False)
            case _:
                logger.debug("Unhandled Stripe event", event_type=event_type)

    async def _on_checkout_completed(self, session: Any) -> None:
        subscription_id = _stripe_id(session.get("subscription"))
        if session.get("mode") != "subscription" or not subscription_id:
            return
        subscription = await self.client.subscriptions.retrieve_async(subscription_id)
        await self._sync_subscription(_as_dict(subscription))

    async def _sync_subscription(self, subscription: Any) -> None:
        customer_id = _stripe_id(subscription.get("customer"))
        if not customer_id:
            logger.warning("Subscription without customer", id=subscription.get("id"))
            return
        synced = await self._billing.sync_by_customer(
            customer_id, subscription_sync_from_stripe(subscription)
        )
        if synced is None:
            logger.warning("No subscription row for customer", customer_id=customer_id)
            return
        logger.info(
            "Subscription synced",
            user_id=synced.user_id,
            status=synced.status,
        )

    async def _record_invoice(self, invoice: Any, *, succeeded: bool) -> None:
        subscription_id = _stripe_id(invoice.get("subscription"))
        payment_intent_id = _stripe_id(invoice.get("payment_intent"))
        if not subscription_id or not payment_intent_id:
            return

        subscription = await self._billing.get_subscription_by_stripe_id(subscription_id)
        if subscription is None:
            logger.warning("Invoice for unknown subscription", id=subscription_id)
            return

        if succeeded:
            amount = invoice.get("amount_paid") or 0
            description = (
                invoice.get("description")
                or f"Subscription payment for {subscription_id}"
            )
        else:
            amount = invoice.get("amount_due") or 0
            description = f"Failed payment for {subscription_id}"

        await self._billing.create_payment(
            NewPayment(
                user_id=subscription.user_id,
                stripe_payment_intent_id=payment_intent_id,
                stripe_charge_id=_stripe_id(invoice.get("charge")) if succeeded else None,
                amount=amount,
                currency=invoice.get("currency") or "usd",
                status=PaymentStatus.SUCCEEDED if succeeded else PaymentStatus.FAILED,
                description=description,
                metadata={
                    "invoiceId": invoice.get("id"),
                    "subscriptionId": subscription_id,
                },
            )
        )
        logger.info(
            "Payment recorded",
            user_id=subscription.user_id,
            succeeded=succeeded,
            amount=amount,
        )
