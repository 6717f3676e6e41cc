"""Project conversations."""

import pytest

from tests.helpers import API, assign_project, auth_headers, submit_project

pytestmark = pytest.mark.integration


async def test_participants_exchange_messages(
    client, dispatcher, client_user, admin_user, master_user
):
    project = await submit_project(client, client_user)
    await assign_project(client, master_user, project["id"], admin_user)
    url = f"{API}/projects/{project['id']}/messages"

    response = await client.post(
        url, json={"body": "Can you share the stack trace?"}, headers=auth_headers(admin_user)
    )
    assert response.status_code == 201
    await client.post(url, json={"body": "Attached."}, headers=auth_headers(client_user))

    response = await client.get(url, headers=auth_headers(client_user))
    bodies = [m["body"] for m in response.json()["items"]]
    assert bodies == ["Attached.", "Can you share the stack trace?"]

    recipients = [p["recipients"] for p in dispatcher.of_kind("message.posted")]
    assert recipients == [[client_user.email], [admin_user.email]]


async def test_blank_messages_are_rejected(client, client_user):
    project = await submit_project(client, client_user)
    response = await client.post(
        f"{API}/projects/{project['id']}/messages",
        json={"body": "   "},
        headers=auth_headers(client_user),
    )
    assert response.status_code == 422


async def test_no_messages_on_cancelled_projects(client, client_user):
    project = await submit_project(client, client_user)
    await client.post(f"{API}/projects/{project['id']}/cancel", headers=auth_headers(client_user))

    response = await client.post(
        f"{API}/projects/{project['id']}/messages",
        json={"body": "Hello?"},
        headers=auth_headers(client_user),
    )
    assert response.status_code == 409


async def test_outsiders_cannot_read_messages(client, make_user, client_user):
    stranger = await make_user("client")
    project = await submit_project(client, client_user)

    response = await client.get(
        f"{API}/projects/{project['id']}/messages", headers=auth_headers(stranger)
    )
    assert response.status_code == 403


async def test_message_pages_cover_every_message_once(client, client_user):
    project = await submit_project(client, client_user)
    url = f"{API}/projects/{project['id']}/messages"
    headers = auth_headers(client_user)
    for i in range(5):
        await client.post(url, json={"body": f"note {i}"}, headers=headers)

    seen: list[str] = []
    params: dict[str, str | int] = {"limit": 2}
    while True:
        page = (await client.get(url, params=params, headers=headers)).json()
        seen.extend(m["body"] for m in page["items"])
        if not page["has_more"]:
            break
        params["cursor"] = page["next_cursor"]

    assert sorted(seen) == [f"note {i}" for i in range(5)]


async def test_malformed_cursor_is_rejected(client, client_user):
    project = await submit_project(client, client_user)

    response = await client.get(
        f"{API}/projects/{project['id']}/messages",
        params={"cursor": "not-a-cursor"},
        headers=auth_headers(client_user),
    )
    assert response.status_code == 422
    assert response.json()["kind"] == "validation_error"
