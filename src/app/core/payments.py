"""Stripe payment gateway.

Thin wrapper over the Stripe client library. Blocking Stripe calls run in a worker
thread. Every outcome the rest of the app sees is either a typed result or one of
the payment errors in ``src.app.core.exceptions``.
"""

import asyncio
import json
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import stripe

from src.app.core.config import Settings, get_settings
from src.app.core.exceptions import (
    PaymentConfigurationError,
    PaymentDeclined,
    PaymentProcessorError,
    WebhookRejected,
)
from src.app.core.logging import get_logger

logger = get_logger(__name__)

REQUIRES_SETUP_REASON = "Payment processing is not configured."


@dataclass(frozen=True)
class PaymentIntentResult:
    """Either a client secret for the hosted payment element, or requires_setup."""

    client_secret: str | None = None
    payment_intent_id: str | None = None
    requires_setup: bool = False
    reason: str | None = None

    @classmethod
    def not_configured(cls) -> "PaymentIntentResult":
        return cls(requires_setup=True, reason=REQUIRES_SETUP_REASON)


@dataclass(frozen=True)
class PaymentEvent:
    """A verified webhook event, reduced to the fields we act on."""

    type: str
    object_id: str | None = None
    customer: str | None = None
    payment_method: str | None = None
    failure_message: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def invoice_id(self) -> str | None:
        return self.metadata.get("invoice_id")

    @property
    def user_id(self) -> str | None:
        return self.metadata.get("user_id")


class StripePaymentGateway:
    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.stripe_secret_key
        self._webhook_secret = settings.stripe_webhook_secret
        self._currency = settings.stripe_currency

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def create_payment_intent(
        self,
        amount_cents: int,
        customer_ref: str | None,
        *,
        invoice_id: str,
        idempotency_key: str,
        payment_method: str | None = None,
    ) -> PaymentIntentResult:
        """Request a processor-side payment intent for ``amount_cents``.

        Returns ``requires_setup`` without contacting Stripe when no secret key is
        configured.

        Raises:
            PaymentDeclined: Stripe refused the card.
            PaymentProcessorError: Any other Stripe failure.
        """
        if not self.configured:
            logger.warning("Payment intent requested but Stripe is not configured")
            return PaymentIntentResult.not_configured()

        params: dict[str, Any] = {
            "amount": amount_cents,
            "currency": self._currency,
            "metadata": {"invoice_id": invoice_id},
            "automatic_payment_methods": {"enabled": True},
        }
        if customer_ref:
            params["customer"] = customer_ref
        if payment_method:
            params["payment_method"] = payment_method

        intent = await self._call(
            stripe.PaymentIntent.create, idempotency_key=idempotency_key, **params
        )
        return PaymentIntentResult(client_secret=intent.client_secret, payment_intent_id=intent.id)

    async def create_customer(self, email: str, name: str, user_id: str) -> str:
        """Create the Stripe customer for a user. Returns the customer id."""
        self._require_configured()
        customer = await self._call(
            stripe.Customer.create,
            email=email,
            name=name,
            metadata={"user_id": user_id},
            idempotency_key=f"customer-{user_id}",
        )
        return str(customer.id)

    async def create_setup_intent(self, customer_ref: str, user_id: str) -> str:
        """Start saving a payment method for later charges. Returns the client secret."""
        self._require_configured()
        intent = await self._call(
            stripe.SetupIntent.create,
            customer=customer_ref,
            usage="off_session",
            metadata={"user_id": user_id},
        )
        return str(intent.client_secret)

    def verify_webhook(self, payload: bytes, signature: str | None) -> PaymentEvent:
        """Verify a webhook signature and parse the event.

        Raises:
            WebhookRejected: Missing secret, missing signature, bad payload or bad signature.
        """
        if not self._webhook_secret:
            raise WebhookRejected("Webhook secret is not configured.")
        if not signature:
            raise WebhookRejected("Missing Stripe-Signature header.")
        try:
            stripe.Webhook.construct_event(
                payload=payload,
                sig_header=signature,
                secret=self._webhook_secret,
            )
        except ValueError as e:
            raise WebhookRejected("Invalid webhook payload.") from e
        except stripe.SignatureVerificationError as e:
            raise WebhookRejected("Invalid webhook signature.") from e

        try:
            event = json.loads(payload)
            obj = event["data"]["object"]
            error = obj.get("last_payment_error") or {}
            return PaymentEvent(
                type=event["type"],
                object_id=obj.get("id"),
                customer=obj.get("customer"),
                payment_method=obj.get("payment_method"),
                failure_message=error.get("message"),
                metadata=dict(obj.get("metadata") or {}),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise WebhookRejected("Invalid webhook payload.") from e

    def _require_configured(self) -> None:
        if not self.configured:
            raise PaymentConfigurationError()

    async def _call(self, fn: Any, **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, api_key=self._api_key, **kwargs)
        except stripe.CardError as e:
            logger.info("Stripe declined payment", code=e.code)
            raise PaymentDeclined() from e
        except stripe.AuthenticationError as e:
            logger.error("Stripe rejected the configured credentials")
            raise PaymentConfigurationError() from e
        except stripe.StripeError as e:
            logger.warning("Stripe request failed", error=str(e), error_type=type(e).__name__)
            raise PaymentProcessorError() from e


@lru_cache
def get_payment_gateway() -> StripePaymentGateway:
    return StripePaymentGateway(get_settings())
