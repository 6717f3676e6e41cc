"""Payment endpoints: payment intents, payment-method setup and the processor webhook."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Header, Request

from src.app.api.dependencies import BillingServiceDep, CurrentSession
from src.app.schemas.billing import PaymentIntentResponse, SetupIntentResponse, WebhookAck

router = APIRouter(tags=["payments"])


@router.post(
    "/invoices/{invoice_id}/create-payment-intent",
    response_model=PaymentIntentResponse,
    response_model_exclude_none=True,
    summary="Create payment intent",
    description=(
        "Returns a client secret for the hosted payment element, or "
        "requiresSetup=true when payment processing is not configured."
    ),
    responses={
        402: {"description": "Card declined"},
        409: {"description": "Invoice already paid"},
        502: {"description": "Payment processor unreachable"},
    },
)
async def create_payment_intent(
    invoice_id: UUID, session: CurrentSession, service: BillingServiceDep
) -> PaymentIntentResponse:
    result = await service.create_payment_intent(session, invoice_id)
    if result.requires_setup:
        return PaymentIntentResponse(requires_setup=True, error=result.reason)
    return PaymentIntentResponse(client_secret=result.client_secret)


@router.post(
    "/payments/setup-intent",
    response_model=SetupIntentResponse,
    summary="Save a payment method",
    description="Starts the processor's setup flow so a card is on file before accepting.",
    responses={503: {"description": "Payment processing is not configured"}},
)
async def create_setup_intent(
    session: CurrentSession, service: BillingServiceDep
) -> SetupIntentResponse:
    client_secret, customer_id = await service.create_setup_intent(session)
    return SetupIntentResponse(client_secret=client_secret, customer_id=customer_id)


@router.post(
    "/payments/webhook",
    response_model=WebhookAck,
    summary="Payment processor webhook",
    responses={400: {"description": "Signature could not be verified"}},
)
async def payment_webhook(
    request: Request,
    service: BillingServiceDep,
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
) -> WebhookAck:
    """Unauthenticated; trust comes from the signature alone."""
    payload = await request.body()
    outcome = await service.handle_webhook(payload, stripe_signature)
    return WebhookAck(outcome=outcome)
