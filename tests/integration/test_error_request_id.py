"""Every error response carries kind, detail and request_id."""

import pytest

from src.app.core.security import create_session_token

pytestmark = pytest.mark.integration


async def test_unknown_route_includes_request_id(client, engine):
    response = await client.get("/api/v1/nonexistent-endpoint")

    assert response.status_code == 404
    data = response.json()
    assert data["kind"] == "http_error"
    assert data["request_id"]


async def test_request_id_header_is_echoed(client, engine):
    response = await client.get(
        "/api/v1/projects", headers={"X-Request-ID": "0f8fad5b-d9cb-469f-a165-70867728950e"}
    )

    assert response.status_code == 401
    assert response.headers["X-Request-ID"] == "0f8fad5b-d9cb-469f-a165-70867728950e"
    assert response.json()["request_id"] == "0f8fad5b-d9cb-469f-a165-70867728950e"


async def test_validation_errors_list_locations(client, engine):
    token = create_session_token("idp|validator", "validator@example.com")
    response = await client.post(
        "/api/v1/projects",
        json={"title": ""},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 422
    data = response.json()
    assert data["kind"] == "validation_error"
    assert {tuple(e["loc"]) for e in data["detail"]} >= {("body", "title"), ("body", "description")}
