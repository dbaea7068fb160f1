"""Stripe Checkout sessions and webhook verification.

The stripe SDK is synchronous; calls run in a worker thread so the event
loop keeps serving status polls.
"""

from __future__ import annotations

import asyncio
from typing import Any

import stripe
import structlog
from typing_extensions import TypedDict

from sitesmith.errors import NotConfiguredError, UpstreamError, ValidationError

logger = structlog.get_logger()


class CheckoutSession(TypedDict):
    id: str
    url: str


class StripeCheckoutClient:
    """Creates Checkout sessions carrying the deployment request as metadata."""

    name = "stripe"

    def __init__(self, api_key: str = "", webhook_secret: str = "", currency: str = "gbp") -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.currency = currency

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def create_checkout_session(
        self,
        product_name: str,
        amount: int,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        customer_email: str = "",
    ) -> CheckoutSession:
        """Create a one-off payment session for *amount* minor units."""
        if not self.is_available:
            raise NotConfiguredError("Stripe")

        params: dict[str, Any] = {
            "api_key": self.api_key,
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {"name": product_name},
                        "unit_amount": amount,
                    },
                    "quantity": 1,
                }
            ],
            "metadata": metadata,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            session = await asyncio.to_thread(stripe.checkout.Session.create, **params)
        except stripe.StripeError as exc:
            status = exc.http_status or 502
            raise UpstreamError(self.name, status, exc.user_message or str(exc)) from exc

        logger.info(
            "Stripe checkout session created",
            checkout_id=session.id,
            amount=amount,
            session_id=metadata.get("session_id", ""),
        )
        return {"id": str(session.id), "url": str(session.url)}

    def parse_webhook(self, payload: bytes, signature: str) -> Any:
        """Verify and decode a webhook body. Raises ValidationError on a bad signature."""
        if not self.webhook_secret:
            raise NotConfiguredError("Stripe webhook")
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            raise ValidationError("Invalid Stripe signature") from exc
        except ValueError as exc:
            raise ValidationError("Invalid Stripe payload") from exc
