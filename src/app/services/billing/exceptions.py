"""Billing exceptions."""

from __future__ import annotations


class BillingError(Exception):
    """Base exception for billing operations."""


class BillingNotConfiguredError(BillingError):
    """Stripe keys are missing."""


class NoSubscriptionError(BillingError):
    """The user has no Stripe customer yet."""


class WebhookSignatureError(BillingError):
    """The webhook signature is missing or does not verify."""


class StripeRequestError(BillingError):
    """A call to the Stripe API failed."""
