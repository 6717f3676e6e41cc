"""Test doubles and helpers for driving projects through their lifecycle over HTTP."""

import hashlib
import hmac
import json
import time
from typing import Any

from httpx import AsyncClient

from src.app.core.config import get_settings
from src.app.core.payments import PaymentIntentResult, StripePaymentGateway
from src.app.core.security import create_session_token
from src.app.models import User

API = "/api/v1"
WEBHOOK_SECRET = "whsec_test_secret"


class RecordingDispatcher:
    """Stands in for NotificationDispatcher; records events instead of sending them."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def notify(self, event_kind: str, payload: dict[str, Any]) -> None:
        self.events.append((event_kind, dict(payload)))

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.events]

    def of_kind(self, event_kind: str) -> list[dict[str, Any]]:
        return [payload for kind, payload in self.events if kind == event_kind]

    def shutdown(self, wait: bool = True) -> None:
        pass


class FakePaymentGateway(StripePaymentGateway):
    """Real webhook verification; payment intents and customers are faked."""

    def __init__(self, configured: bool = True) -> None:
        settings = get_settings().model_copy(
            update={
                "stripe_secret_key": "sk_test_fake" if configured else None,
                "stripe_webhook_secret": WEBHOOK_SECRET,
            }
        )
        super().__init__(settings)
        self.intents: list[dict[str, Any]] = []

    async def create_payment_intent(
        self,
        amount_cents: int,
        customer_ref: str | None,
        *,
        invoice_id: str,
        idempotency_key: str,
        payment_method: str | None = None,
    ) -> PaymentIntentResult:
        if not self.configured:
            return PaymentIntentResult.not_configured()
        intent_id = f"pi_{len(self.intents) + 1}"
        self.intents.append(
            {
                "id": intent_id,
                "amount": amount_cents,
                "invoice_id": invoice_id,
                "idempotency_key": idempotency_key,
            }
        )
        return PaymentIntentResult(client_secret=f"{intent_id}_secret", payment_intent_id=intent_id)

    async def create_customer(self, email: str, name: str, user_id: str) -> str:
        self._require_configured()
        return f"cus_{user_id[:8]}"

    async def create_setup_intent(self, customer_ref: str, user_id: str) -> str:
        self._require_configured()
        return f"seti_{user_id[:8]}_secret"


def auth_headers(user: User) -> dict[str, str]:
    token = create_session_token(subject=user.external_id, email=user.email, name=user.full_name)
    return {"Authorization": f"Bearer {token}"}


def _ok(response, status_code: int = 200) -> dict[str, Any]:
    assert response.status_code == status_code, response.text
    return response.json()


async def submit_project(client: AsyncClient, owner: User, **fields: Any) -> dict[str, Any]:
    body = {
        "title": "Checkout returns 500",
        "description": "Empty carts crash the checkout endpoint.",
        "repository_url": "https://github.com/example/shop",
        "budget": "1000.00",
        **fields,
    }
    response = await client.post(f"{API}/projects", json=body, headers=auth_headers(owner))
    return _ok(response, 201)


async def assign_project(
    client: AsyncClient, master: User, project_id: str, admin: User
) -> dict[str, Any]:
    response = await client.post(
        f"{API}/projects/{project_id}/assign",
        json={"admin_id": str(admin.id)},
        headers=auth_headers(master),
    )
    return _ok(response)


async def send_proposal(
    client: AsyncClient, admin: User, project_id: str, **pricing: Any
) -> dict[str, Any]:
    body = pricing or {"pricing_type": "flat_fee", "fix_fee": "500.00"}
    response = await client.post(
        f"{API}/projects/{project_id}/proposals", json=body, headers=auth_headers(admin)
    )
    return _ok(response, 201)


async def accept_proposal(client: AsyncClient, owner: User, proposal_id: str) -> dict[str, Any]:
    response = await client.post(
        f"{API}/proposals/{proposal_id}/accept", headers=auth_headers(owner)
    )
    return _ok(response)


async def start_work(client: AsyncClient, admin: User, project_id: str) -> dict[str, Any]:
    response = await client.post(f"{API}/projects/{project_id}/start", headers=auth_headers(admin))
    return _ok(response)


async def log_hours(
    client: AsyncClient, admin: User, project_id: str, hours: str
) -> dict[str, Any]:
    response = await client.post(
        f"{API}/projects/{project_id}/time-entries",
        json={"hours_spent": hours, "description": "Debugging"},
        headers=auth_headers(admin),
    )
    return _ok(response, 201)


async def project_in_progress(
    client: AsyncClient,
    owner: User,
    admin: User,
    master: User,
    **pricing: Any,
) -> dict[str, Any]:
    """Submit, assign, propose, accept and start. Returns the project."""
    project = await submit_project(client, owner)
    await assign_project(client, master, project["id"], admin)
    proposal = await send_proposal(client, admin, project["id"], **pricing)
    await accept_proposal(client, owner, proposal["id"])
    return await start_work(client, admin, project["id"])


def signed_webhook(event_type: str, obj: Any) -> tuple[bytes, dict[str, str]]:
    """Build a webhook body with a valid Stripe-Signature header."""
    payload = json.dumps(
        {
            "id": f"evt_{int(time.time() * 1000)}",
            "object": "event",
            "type": event_type,
            "data": {"object": obj},
        }
    ).encode()
    timestamp = int(time.time())
    signature = hmac.new(
        WEBHOOK_SECRET.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256
    ).hexdigest()
    return payload, {
        "Stripe-Signature": f"t={timestamp},v1={signature}",
        "Content-Type": "application/json",
    }


async def completed_project(
    client: AsyncClient,
    owner: User,
    admin: User,
    master: User,
    **pricing: Any,
) -> dict[str, Any]:
    """Run a project through to completion. Returns the completed project."""
    project = await project_in_progress(client, owner, admin, master, **pricing)
    response = await client.post(
        f"{API}/projects/{project['id']}/complete", headers=auth_headers(admin)
    )
    return _ok(response)
