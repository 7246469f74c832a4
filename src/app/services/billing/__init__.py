"""Stripe checkout, customer portal and webhook handling."""

from app.services.billing.service import BillingService, CheckoutSession


__all__ = ["BillingService", "CheckoutSession"]
