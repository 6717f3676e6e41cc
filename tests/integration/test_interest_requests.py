"""Software admins asking for unassigned projects, and master admins deciding."""

import pytest

from tests.helpers import API, assign_project, auth_headers, submit_project

pytestmark = pytest.mark.integration


async def _ask(client, admin, project_id: str, note: str | None = "I know this stack"):
    return await client.post(
        f"{API}/interest-requests",
        json={"project_id": project_id, "note": note},
        headers=auth_headers(admin),
    )


async def test_admin_browses_open_projects_without_pricing(
    client, client_user, admin_user, master_user
):
    open_project = await submit_project(client, client_user)
    taken = await submit_project(client, client_user)
    await assign_project(client, master_user, taken["id"], admin_user)

    response = await client.get(f"{API}/projects/open", headers=auth_headers(admin_user))
    assert response.status_code == 200
    [item] = response.json()["items"]
    assert item["id"] == open_project["id"]
    assert item["pricing_redacted"] is True
    assert "budget" not in item

    response = await client.get(f"{API}/projects/open", headers=auth_headers(master_user))
    assert response.json()["items"][0]["budget"] == 100_000


async def test_clients_cannot_browse_open_projects(client, client_user):
    response = await client.get(f"{API}/projects/open", headers=auth_headers(client_user))
    assert response.status_code == 403


async def test_approval_assigns_and_declines_competitors(
    client, dispatcher, make_user, client_user, admin_user, master_user
):
    rival = await make_user("software_admin")
    project = await submit_project(client, client_user)

    response = await _ask(client, admin_user, project["id"])
    assert response.status_code == 201
    chosen = response.json()
    assert chosen["status"] == "pending"
    [notice] = dispatcher.of_kind("interest.requested")
    assert notice["recipients"] == [master_user.email]

    other = (await _ask(client, rival, project["id"], note=None)).json()

    response = await client.post(
        f"{API}/interest-requests/{chosen['id']}/approve", headers=auth_headers(master_user)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "approved"
    assert response.json()["decided_by_id"] == str(master_user.id)

    response = await client.get(
        f"{API}/projects/{project['id']}", headers=auth_headers(admin_user)
    )
    assert response.json()["status"] == "assigned"
    assert response.json()["assigned_admin_id"] == str(admin_user.id)

    response = await client.get(
        f"{API}/interest-requests", headers=auth_headers(rival), params={"status": "declined"}
    )
    [declined] = response.json()["items"]
    assert declined["id"] == other["id"]

    assert dispatcher.of_kind("project.assigned")[0]["recipients"] == [admin_user.email]
    assert dispatcher.of_kind("interest.declined")[0]["recipients"] == [rival.email]

    response = await client.get(
        f"{API}/audit/logs/entity/project/{project['id']}", headers=auth_headers(master_user)
    )
    assert [log["action"] for log in response.json()["items"]] == ["project.assign"]


async def test_duplicate_pending_request_is_a_conflict(client, client_user, admin_user):
    project = await submit_project(client, client_user)
    await _ask(client, admin_user, project["id"])

    response = await _ask(client, admin_user, project["id"])
    assert response.status_code == 409
    assert response.json()["kind"] == "conflicting_interest"


async def test_assigned_projects_cannot_be_requested(
    client, make_user, client_user, admin_user, master_user
):
    rival = await make_user("software_admin")
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], rival)

    response = await _ask(client, admin_user, project["id"])
    assert response.status_code == 409
    assert response.json()["kind"] == "invalid_transition"


async def test_approving_after_direct_assignment_is_refused(
    client, make_user, client_user, admin_user, master_user
):
    rival = await make_user("software_admin")
    project = await submit_project(client, client_user)
    interest = (await _ask(client, admin_user, project["id"])).json()
    await assign_project(client, master_user, project["id"], rival)

    response = await client.post(
        f"{API}/interest-requests/{interest['id']}/approve", headers=auth_headers(master_user)
    )
    assert response.status_code == 409

    response = await client.get(
        f"{API}/projects/{project['id']}", headers=auth_headers(master_user)
    )
    assert response.json()["assigned_admin_id"] == str(rival.id)

    response = await client.get(f"{API}/interest-requests", headers=auth_headers(admin_user))
    assert response.json()["items"][0]["status"] == "pending"


async def test_decline_is_final(client, dispatcher, client_user, admin_user, master_user):
    project = await submit_project(client, client_user)
    interest = (await _ask(client, admin_user, project["id"])).json()

    url = f"{API}/interest-requests/{interest['id']}"
    response = await client.post(f"{url}/decline", headers=auth_headers(master_user))
    assert response.status_code == 200
    assert response.json()["status"] == "declined"
    assert dispatcher.of_kind("interest.declined")[0]["recipients"] == [admin_user.email]

    response = await client.post(f"{url}/approve", headers=auth_headers(master_user))
    assert response.status_code == 409
    response = await client.post(f"{url}/decline", headers=auth_headers(master_user))
    assert response.status_code == 409

    # A declined admin may ask again
    response = await _ask(client, admin_user, project["id"])
    assert response.status_code == 201


async def test_only_software_admins_ask_and_only_masters_decide(
    client, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)

    response = await _ask(client, master_user, project["id"])
    assert response.status_code == 403
    response = await _ask(client, client_user, project["id"])
    assert response.status_code == 403

    interest = (await _ask(client, admin_user, project["id"])).json()
    response = await client.post(
        f"{API}/interest-requests/{interest['id']}/approve", headers=auth_headers(admin_user)
    )
    assert response.status_code == 403

    response = await client.get(f"{API}/interest-requests", headers=auth_headers(client_user))
    assert response.status_code == 403


async def test_admins_only_see_their_own_requests(
    client, make_user, client_user, admin_user, master_user
):
    rival = await make_user("software_admin")
    project = await submit_project(client, client_user)
    await _ask(client, admin_user, project["id"])
    await _ask(client, rival, project["id"])

    response = await client.get(f"{API}/interest-requests", headers=auth_headers(admin_user))
    assert {r["admin_id"] for r in response.json()["items"]} == {str(admin_user.id)}

    response = await client.get(f"{API}/interest-requests", headers=auth_headers(master_user))
    assert len(response.json()["items"]) == 2


async def test_unknown_project_is_not_found(client, admin_user):
    response = await _ask(client, admin_user, "00000000-0000-4000-8000-000000000000")
    assert response.status_code == 404
