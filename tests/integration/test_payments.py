"""Payment intents, payment-method setup and webhook handling."""

import pytest

from tests.helpers import (
    API,
    FakePaymentGateway,
    accept_proposal,
    assign_project,
    auth_headers,
    project_in_progress,
    send_proposal,
    signed_webhook,
    submit_project,
)

pytestmark = pytest.mark.integration


async def _completed_flat_fee_invoice(client, owner, admin, master) -> str:
    project = await project_in_progress(client, owner, admin, master)
    response = await client.post(
        f"{API}/projects/{project['id']}/complete", headers=auth_headers(admin)
    )
    return response.json()["final_invoice"]["id"]


async def _webhook(client, event_type: str, obj: object):
    payload, headers = signed_webhook(event_type, obj)
    return await client.post(f"{API}/payments/webhook", content=payload, headers=headers)


async def test_payment_intent_returns_client_secret(
    client, gateway, client_user, admin_user, master_user
):
    invoice_id = await _completed_flat_fee_invoice(client, client_user, admin_user, master_user)

    response = await client.post(
        f"{API}/invoices/{invoice_id}/create-payment-intent", headers=auth_headers(client_user)
    )
    assert response.status_code == 200
    assert response.json() == {"clientSecret": "pi_1_secret", "requiresSetup": False}

    [intent] = gateway.intents
    assert intent["amount"] == 50_000
    assert intent["invoice_id"] == invoice_id
    assert intent["idempotency_key"] == f"invoice-{invoice_id}-0"


async def test_only_the_client_pays(client, client_user, admin_user, master_user):
    invoice_id = await _completed_flat_fee_invoice(client, client_user, admin_user, master_user)

    response = await client.post(
        f"{API}/invoices/{invoice_id}/create-payment-intent", headers=auth_headers(admin_user)
    )
    assert response.status_code == 403


async def test_succeeded_webhook_marks_paid_exactly_once(
    client, dispatcher, client_user, admin_user, master_user
):
    invoice_id = await _completed_flat_fee_invoice(client, client_user, admin_user, master_user)
    await client.post(
        f"{API}/invoices/{invoice_id}/create-payment-intent", headers=auth_headers(client_user)
    )

    event = {"id": "pi_1", "object": "payment_intent", "metadata": {"invoice_id": invoice_id}}
    first = await _webhook(client, "payment_intent.succeeded", event)
    redelivered = await _webhook(client, "payment_intent.succeeded", event)

    assert first.json() == {"received": True, "outcome": "paid"}
    assert redelivered.json() == {"received": True, "outcome": "already_paid"}

    response = await client.get(f"{API}/invoices/{invoice_id}", headers=auth_headers(client_user))
    invoice = response.json()
    assert invoice["status"] == "paid"
    assert invoice["paid_at"] is not None
    assert len(dispatcher.of_kind("invoice.paid")) == 1

    # Paid invoices can't be charged again
    response = await client.post(
        f"{API}/invoices/{invoice_id}/create-payment-intent", headers=auth_headers(client_user)
    )
    assert response.status_code == 409


async def test_failed_webhook_is_recorded_once_and_retry_uses_new_key(
    client, gateway, client_user, admin_user, master_user
):
    invoice_id = await _completed_flat_fee_invoice(client, client_user, admin_user, master_user)
    await client.post(
        f"{API}/invoices/{invoice_id}/create-payment-intent", headers=auth_headers(client_user)
    )

    event = {
        "id": "pi_1",
        "object": "payment_intent",
        "metadata": {"invoice_id": invoice_id},
        "last_payment_error": {"message": "Your card was declined."},
    }
    first = await _webhook(client, "payment_intent.payment_failed", event)
    redelivered = await _webhook(client, "payment_intent.payment_failed", event)
    assert first.json()["outcome"] == "failed"
    assert redelivered.json()["outcome"] == "ignored"

    response = await client.get(f"{API}/invoices/{invoice_id}", headers=auth_headers(client_user))
    invoice = response.json()
    assert invoice["status"] == "failed"
    assert invoice["payment_attempts"] == 1

    await client.post(
        f"{API}/invoices/{invoice_id}/create-payment-intent", headers=auth_headers(client_user)
    )
    assert gateway.intents[-1]["idempotency_key"] == f"invoice-{invoice_id}-1"


async def test_bad_signature_is_rejected_and_audited(client, engine, master_user):
    payload, headers = signed_webhook("payment_intent.succeeded", {"id": "pi_1"})
    headers["Stripe-Signature"] = headers["Stripe-Signature"].replace("v1=", "v1=00")

    response = await client.post(f"{API}/payments/webhook", content=payload, headers=headers)
    assert response.status_code == 400
    assert response.json()["kind"] == "webhook_rejected"

    response = await client.get(
        f"{API}/audit/logs",
        params={"action": "payment.webhook_rejected"},
        headers=auth_headers(master_user),
    )
    [log] = response.json()["items"]
    assert log["status"] == "failure"


async def test_signed_event_with_list_object_is_rejected(client, engine, master_user):
    response = await _webhook(client, "payment_intent.succeeded", ["pi_1"])
    assert response.status_code == 400
    assert response.json()["kind"] == "webhook_rejected"

    response = await client.get(
        f"{API}/audit/logs",
        params={"action": "payment.webhook_rejected"},
        headers=auth_headers(master_user),
    )
    [log] = response.json()["items"]
    assert log["error_message"] == "Invalid webhook payload."


async def test_missing_signature_is_rejected(client, engine):
    response = await client.post(f"{API}/payments/webhook", content=b"{}")
    assert response.status_code == 400


async def test_unhandled_event_types_are_acknowledged(client, engine):
    response = await _webhook(client, "customer.created", {"id": "cus_1"})
    assert response.json() == {"received": True, "outcome": "ignored"}


async def test_setup_intent_creates_customer_once(client, make_user):
    owner = await make_user("build")

    first = await client.post(f"{API}/payments/setup-intent", headers=auth_headers(owner))
    second = await client.post(f"{API}/payments/setup-intent", headers=auth_headers(owner))

    assert first.status_code == 200
    body = first.json()
    assert body["clientSecret"].startswith("seti_")
    assert body["customerId"] == second.json()["customerId"]


async def test_saved_payment_method_unblocks_acceptance(
    client, make_user, admin_user, master_user
):
    owner = await make_user("build")
    project = await submit_project(client, owner)
    await assign_project(client, master_user, project["id"], admin_user)
    proposal = await send_proposal(client, admin_user, project["id"])

    response = await client.post(f"{API}/payments/setup-intent", headers=auth_headers(owner))
    customer_id = response.json()["customerId"]

    response = await _webhook(
        client,
        "setup_intent.succeeded",
        {
            "id": "seti_1",
            "object": "setup_intent",
            "customer": customer_id,
            "payment_method": "pm_card_visa",
            "metadata": {"user_id": str(owner.id)},
        },
    )
    assert response.json()["outcome"] == "payment_method_saved"

    response = await client.get(f"{API}/users/me", headers=auth_headers(owner))
    assert response.json()["has_payment_method"] is True
    accepted = await accept_proposal(client, owner, proposal["id"])
    assert accepted["status"] == "accepted"


class TestPaymentsNotConfigured:
    @pytest.fixture
    def gateway(self) -> FakePaymentGateway:
        return FakePaymentGateway(configured=False)

    async def test_payment_intent_reports_requires_setup(
        self, client, client_user, admin_user, master_user
    ):
        invoice_id = await _completed_flat_fee_invoice(
            client, client_user, admin_user, master_user
        )

        response = await client.post(
            f"{API}/invoices/{invoice_id}/create-payment-intent",
            headers=auth_headers(client_user),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["requiresSetup"] is True
        assert body["error"] == "Payment processing is not configured."
        assert "clientSecret" not in body

    async def test_setup_intent_is_unavailable(self, client, client_user):
        response = await client.post(
            f"{API}/payments/setup-intent", headers=auth_headers(client_user)
        )
        assert response.status_code == 503
        assert response.json()["kind"] == "payment_configuration_error"


async def test_admin_is_told_of_payment_without_the_amount(
    client, dispatcher, client_user, admin_user, master_user
):
    invoice_id = await _completed_flat_fee_invoice(client, client_user, admin_user, master_user)

    event = {"id": "pi_1", "object": "payment_intent", "metadata": {"invoice_id": invoice_id}}
    await _webhook(client, "payment_intent.succeeded", event)

    [paid] = dispatcher.of_kind("invoice.paid")
    assert paid["recipients"] == [client_user.email]
    assert paid["amount"] == "500.00"

    [settled] = dispatcher.of_kind("invoice.settled")
    assert settled["recipients"] == [admin_user.email]
    assert settled["invoice_id"] == invoice_id
    assert "amount" not in settled

    for _, payload in dispatcher.events:
        if admin_user.email in payload["recipients"]:
            assert "amount" not in payload
