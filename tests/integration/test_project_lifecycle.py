"""Project lifecycle over HTTP: intake through completion, refusals and races."""

import asyncio

import pytest

from src.app.core.security import create_session_token
from tests.helpers import (
    API,
    accept_proposal,
    assign_project,
    auth_headers,
    project_in_progress,
    send_proposal,
    start_work,
    submit_project,
)

pytestmark = pytest.mark.integration


async def test_flat_fee_project_end_to_end(
    client, dispatcher, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    assert project["status"] == "submitted"
    assert project["budget"] == 100_000

    assigned = await assign_project(client, master_user, project["id"], admin_user)
    assert assigned["status"] == "assigned"
    assert assigned["assigned_admin_id"] == str(admin_user.id)

    proposal = await send_proposal(
        client, admin_user, project["id"], pricing_type="flat_fee", fix_fee="500.00"
    )
    assert proposal["status"] == "pending"

    accepted = await accept_proposal(client, client_user, proposal["id"])
    assert accepted["status"] == "accepted"

    started = await start_work(client, admin_user, project["id"])
    assert started["status"] == "in_progress"
    assert started["started_at"] is not None

    response = await client.post(
        f"{API}/projects/{project['id']}/complete", headers=auth_headers(admin_user)
    )
    assert response.status_code == 200, response.text
    completed = response.json()
    assert completed["status"] == "completed"
    assert completed["completed_at"] is not None
    # Software admins never see amounts
    assert "amount" not in completed["final_invoice"]

    response = await client.get(
        f"{API}/projects/{project['id']}/invoices", headers=auth_headers(client_user)
    )
    invoices = response.json()
    assert len(invoices) == 1
    assert invoices[0]["amount"] == 50_000
    assert invoices[0]["status"] == "pending"

    assert dispatcher.kinds() == [
        "project.submitted",
        "project.assigned",
        "proposal.created",
        "proposal.accepted",
        "project.started",
        "project.completed",
        "invoice.created",
    ]
    assert dispatcher.of_kind("project.submitted")[0]["recipients"] == [master_user.email]
    assert dispatcher.of_kind("invoice.created")[0]["recipients"] == [client_user.email]


async def test_only_clients_submit_projects(client, admin_user):
    response = await client.post(
        f"{API}/projects",
        json={"title": "t", "description": "d"},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 403
    assert response.json()["kind"] == "forbidden"


async def test_budget_must_be_a_decimal_string(client, client_user):
    response = await client.post(
        f"{API}/projects",
        json={"title": "Slow query", "description": "Report page times out", "budget": 12.5},
        headers=auth_headers(client_user),
    )
    assert response.status_code == 422
    assert response.json()["kind"] == "validation_error"


async def test_second_pending_proposal_is_a_conflict(
    client, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)
    await send_proposal(client, admin_user, project["id"])

    response = await client.post(
        f"{API}/projects/{project['id']}/proposals",
        json={"pricing_type": "hourly", "hourly_rate": "90.00", "estimated_hours": "4"},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 409
    assert response.json()["kind"] == "conflicting_proposal"


async def test_rejected_proposal_allows_a_revised_one(
    client, dispatcher, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)
    first = await send_proposal(
        client, admin_user, project["id"], pricing_type="flat_fee", fix_fee="900.00"
    )

    response = await client.post(
        f"{API}/proposals/{first['id']}/reject", headers=auth_headers(client_user)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"

    response = await client.get(
        f"{API}/projects/{project['id']}", headers=auth_headers(client_user)
    )
    assert response.json()["status"] == "assigned"

    await send_proposal(
        client, admin_user, project["id"], pricing_type="flat_fee", fix_fee="700.00"
    )
    response = await client.get(
        f"{API}/projects/{project['id']}/proposals", headers=auth_headers(client_user)
    )
    history = response.json()
    assert [p["status"] for p in history] == ["pending", "rejected"]
    assert dispatcher.of_kind("proposal.rejected")[0]["recipients"] == [admin_user.email]


async def test_accepting_requires_a_saved_payment_method(
    client, make_user, admin_user, master_user
):
    owner = await make_user("build")  # no payment method on file
    project = await submit_project(client, owner)
    await assign_project(client, master_user, project["id"], admin_user)
    proposal = await send_proposal(client, admin_user, project["id"])

    response = await client.post(
        f"{API}/proposals/{proposal['id']}/accept", headers=auth_headers(owner)
    )
    assert response.status_code == 402
    assert response.json()["kind"] == "payment_method_required"

    response = await client.get(f"{API}/projects/{project['id']}", headers=auth_headers(owner))
    assert response.json()["status"] == "proposed"


async def test_deciding_twice_is_refused(client, client_user, admin_user, master_user):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)
    proposal = await send_proposal(client, admin_user, project["id"])
    await accept_proposal(client, client_user, proposal["id"])

    response = await client.post(
        f"{API}/proposals/{proposal['id']}/reject", headers=auth_headers(client_user)
    )
    assert response.status_code == 409
    assert response.json()["kind"] == "invalid_transition"


async def test_concurrent_start_succeeds_exactly_once(
    client, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)
    proposal = await send_proposal(client, admin_user, project["id"])
    await accept_proposal(client, client_user, proposal["id"])

    url = f"{API}/projects/{project['id']}/start"
    responses = await asyncio.gather(
        client.post(url, headers=auth_headers(admin_user)),
        client.post(url, headers=auth_headers(admin_user)),
    )
    assert sorted(r.status_code for r in responses) == [200, 409]


async def test_start_before_acceptance_is_refused(client, client_user, admin_user, master_user):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)

    response = await client.post(
        f"{API}/projects/{project['id']}/start", headers=auth_headers(admin_user)
    )
    assert response.status_code == 409
    assert response.json()["kind"] == "invalid_transition"


async def test_assign_only_from_submitted(client, client_user, admin_user, master_user):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)

    response = await client.post(
        f"{API}/projects/{project['id']}/assign",
        json={"admin_id": str(admin_user.id)},
        headers=auth_headers(master_user),
    )
    assert response.status_code == 409


async def test_assign_requires_an_admin(client, make_user, client_user, master_user):
    other_client = await make_user("client")
    project = await submit_project(client, client_user)

    response = await client.post(
        f"{API}/projects/{project['id']}/assign",
        json={"admin_id": str(other_client.id)},
        headers=auth_headers(master_user),
    )
    assert response.status_code == 422


async def test_cancel_rejects_pending_proposal(
    client, dispatcher, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)
    proposal = await send_proposal(client, admin_user, project["id"])

    response = await client.post(
        f"{API}/projects/{project['id']}/cancel", headers=auth_headers(client_user)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["cancelled_at"] is not None

    response = await client.get(
        f"{API}/proposals/{proposal['id']}", headers=auth_headers(client_user)
    )
    assert response.json()["status"] == "rejected"

    # Terminal: a second cancel is refused
    response = await client.post(
        f"{API}/projects/{project['id']}/cancel", headers=auth_headers(client_user)
    )
    assert response.status_code == 409

    assert dispatcher.of_kind("project.cancelled")[0]["recipients"] == [admin_user.email]


async def test_assigned_admin_cannot_cancel(client, client_user, admin_user, master_user):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)

    response = await client.post(
        f"{API}/projects/{project['id']}/cancel", headers=auth_headers(admin_user)
    )
    assert response.status_code == 403


async def test_other_clients_cannot_see_a_project(client, make_user, client_user):
    stranger = await make_user("client")
    project = await submit_project(client, client_user)

    response = await client.get(f"{API}/projects/{project['id']}", headers=auth_headers(stranger))
    assert response.status_code == 403


async def test_unassigned_admin_cannot_see_a_project(client, make_user, client_user):
    other_admin = await make_user("software_admin")
    project = await submit_project(client, client_user)

    response = await client.get(
        f"{API}/projects/{project['id']}", headers=auth_headers(other_admin)
    )
    assert response.status_code == 403


async def test_missing_session_is_unauthenticated(client, engine):
    response = await client.get(f"{API}/projects")

    assert response.status_code == 401
    body = response.json()
    assert body["kind"] == "unauthenticated"
    assert body["request_id"]


async def test_invalid_token_is_unauthenticated(client, engine):
    response = await client.get(
        f"{API}/projects", headers={"Authorization": "Bearer not-a-real-token"}
    )
    assert response.status_code == 401


async def test_first_request_provisions_a_client(client, engine):
    token = create_session_token("idp|new-person", "New.Person@Example.com", name="New Person")
    response = await client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    me = response.json()
    assert me["email"] == "new.person@example.com"
    assert me["role"] == "client"
    assert me["full_name"] == "New Person"
    assert me["has_payment_method"] is False


async def test_project_listing_is_scoped_by_role(
    client, make_user, client_user, admin_user, master_user
):
    other_client = await make_user("client")
    mine = await submit_project(client, client_user)
    await submit_project(client, other_client)
    await assign_project(client, master_user, mine["id"], admin_user)

    response = await client.get(f"{API}/projects", headers=auth_headers(client_user))
    assert [p["id"] for p in response.json()["items"]] == [mine["id"]]

    response = await client.get(f"{API}/projects", headers=auth_headers(admin_user))
    assert [p["id"] for p in response.json()["items"]] == [mine["id"]]

    response = await client.get(f"{API}/projects", headers=auth_headers(master_user))
    assert len(response.json()["items"]) == 2

    response = await client.get(
        f"{API}/projects", params={"status": "submitted"}, headers=auth_headers(master_user)
    )
    assert len(response.json()["items"]) == 1


async def test_master_admin_override_is_audited(
    client, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)
    proposal = await send_proposal(client, admin_user, project["id"])
    await accept_proposal(client, client_user, proposal["id"])

    # Starting work belongs to the assigned admin; the master admin may do it anyway
    started = await start_work(client, master_user, project["id"])
    assert started["status"] == "in_progress"

    response = await client.get(
        f"{API}/audit/logs",
        params={"action": "project.override"},
        headers=auth_headers(master_user),
    )
    logs = response.json()["items"]
    assert len(logs) == 1
    assert logs[0]["entity_id"] == project["id"]
    assert logs[0]["actor_id"] == str(master_user.id)
    assert logs[0]["changes"]["action"] == "start"

    response = await client.get(
        f"{API}/audit/logs/entity/project/{project['id']}", headers=auth_headers(master_user)
    )
    actions = {log["action"] for log in response.json()["items"]}
    assert actions == {"project.assign", "project.override"}


async def test_audit_log_is_master_only(client, admin_user):
    response = await client.get(f"{API}/audit/logs", headers=auth_headers(admin_user))
    assert response.status_code == 403


async def test_completing_requires_work_in_progress(
    client, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)

    response = await client.post(
        f"{API}/projects/{project['id']}/complete", headers=auth_headers(admin_user)
    )
    assert response.status_code == 409


async def test_project_in_progress_helper_reaches_in_progress(
    client, client_user, admin_user, master_user
):
    project = await project_in_progress(client, client_user, admin_user, master_user)
    assert project["status"] == "in_progress"


async def test_master_admin_cancel_is_audited(
    client, dispatcher, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)

    response = await client.post(
        f"{API}/projects/{project['id']}/cancel", headers=auth_headers(master_user)
    )
    assert response.status_code == 200

    response = await client.get(
        f"{API}/audit/logs/entity/project/{project['id']}", headers=auth_headers(master_user)
    )
    logs = {log["action"]: log for log in response.json()["items"]}
    assert set(logs) == {"project.assign", "project.cancel"}
    cancel = logs["project.cancel"]
    assert cancel["actor_id"] == str(master_user.id)
    assert cancel["changes"] == {"from_status": "assigned", "to_status": "cancelled"}

    [notice] = dispatcher.of_kind("project.cancelled")
    assert sorted(notice["recipients"]) == sorted([client_user.email, admin_user.email])


async def test_client_cancelling_own_project_is_not_audited(client, client_user, master_user):
    project = await submit_project(client, client_user)

    await client.post(f"{API}/projects/{project['id']}/cancel", headers=auth_headers(client_user))

    response = await client.get(
        f"{API}/audit/logs/entity/project/{project['id']}", headers=auth_headers(master_user)
    )
    assert response.json()["items"] == []


@pytest.mark.parametrize(
    ("path", "body"),
    [
        ("/projects/{id}/proposals", {"pricing_type": "flat_fee", "fix_fee": "10"}),
        ("/projects/{id}/cancel", None),
        ("/projects/{id}/messages", {"body": "hello"}),
        ("/projects/{id}/time-entries", {"hours_spent": "1"}),
    ],
)
async def test_writes_without_a_session_are_unauthenticated(client, client_user, path, body):
    project = await submit_project(client, client_user)

    response = await client.post(f"{API}{path.format(id=project['id'])}", json=body)
    assert response.status_code == 401
    assert response.json()["kind"] == "unauthenticated"


async def test_huge_fee_is_a_validation_error(client, client_user, admin_user, master_user):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)

    response = await client.post(
        f"{API}/projects/{project['id']}/proposals",
        json={"pricing_type": "flat_fee", "fix_fee": "1e30"},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 422
    assert response.json()["kind"] == "validation_error"


async def test_fee_beyond_32_bits_is_stored_exactly(client, client_user, admin_user, master_user):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)
    proposal = await send_proposal(
        client, admin_user, project["id"], pricing_type="flat_fee", fix_fee="50000000.00"
    )

    response = await client.get(
        f"{API}/proposals/{proposal['id']}", headers=auth_headers(client_user)
    )
    assert response.json()["fix_fee"] == 5_000_000_000
