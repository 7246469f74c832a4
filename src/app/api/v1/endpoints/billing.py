"""Stripe checkout, customer portal and webhook endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status

from app.api.dependencies import get_billing_service, get_request_origin
from app.auth.dependencies import CurrentUser
from app.core.exceptions import (
    AppException,
    ExternalServiceException,
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
)
from app.observability.logging import get_logger
from app.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    PortalResponse,
    SubscriptionResponse,
    WebhookResponse,
)
from app.services.billing import BillingService
from app.services.billing.exceptions import (
    BillingNotConfiguredError,
    NoSubscriptionError,
    StripeRequestError,
    WebhookSignatureError,
)


logger = get_logger(__name__)

router = APIRouter(prefix="/stripe", tags=["Billing"])

Billing = Annotated[BillingService, Depends(get_billing_service)]
Origin = Annotated[str, Depends(get_request_origin)]


@router.post(
    "/create-checkout-session",
    response_model=CheckoutResponse,
    summary="Start a Stripe Checkout session",
    responses={502: {"description": "Stripe request failed"}},
)
async def create_checkout_session(
    body: CheckoutRequest, user: CurrentUser, billing: Billing, origin: Origin
) -> CheckoutResponse:
    try:
        session = await billing.create_checkout_session(
            user,
            origin,
            price_id=body.price_id,
            success_url=body.success_url,
            cancel_url=body.cancel_url,
        )
    except BillingNotConfiguredError as e:
        raise ServiceUnavailableException(str(e)) from None
    except StripeRequestError as e:
        raise ExternalServiceException("Stripe", str(e)) from None
    return CheckoutResponse(session_id=session.session_id, url=session.url)


@router.post(
    "/customer-portal",
    response_model=PortalResponse,
    summary="Open the Stripe customer portal",
    responses={404: {"description": "No subscription found"}},
)
async def customer_portal(
    user: CurrentUser, billing: Billing, origin: Origin
) -> PortalResponse:
    try:
        url = await billing.create_portal_session(user.id, origin)
    except NoSubscriptionError as e:
        raise NotFoundException("Subscription", str(e)) from None
    except StripeRequestError as e:
        raise ExternalServiceException("Stripe", str(e)) from None
    return PortalResponse(url=url)


@router.post(
    "/webhook",
    response_model=WebhookResponse,
    summary="Stripe webhook receiver",
    responses={400: {"description": "Missing or invalid signature"}},
)
async def stripe_webhook(
    request: Request,
    billing: Billing,
    stripe_signature: Annotated[str | None, Header(alias="stripe-signature")] = None,
) -> WebhookResponse:
    """Verify the signature against the raw body and apply the event."""
    payload = await request.body()
    try:
        await billing.handle_webhook(payload, stripe_signature)
    except WebhookSignatureError as e:
        logger.warning("Rejected Stripe webhook", error=str(e))
        raise ValidationException(str(e)) from None
    except Exception as e:
        logger.opt(exception=e).error("Stripe webhook handler failed")
        raise AppException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="WEBHOOK_ERROR",
            message="Webhook handler failed",
        ) from None
    return WebhookResponse()


@router.get(
    "/subscription",
    response_model=SubscriptionResponse | None,
    summary="The caller's subscription",
)
async def get_subscription(
    user: CurrentUser, billing: Billing
) -> SubscriptionResponse | None:
    subscription = await billing.get_subscription(user.id)
    return SubscriptionResponse.model_validate(subscription) if subscription else None
