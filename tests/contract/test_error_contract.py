import pytest


@pytest.mark.asyncio
async def test_error_contract_unauthenticated(client):
    r = await client.get("/api/auth/me")  # no cookie
    assert r.status_code == 401
    data = r.json()
    assert set(data.keys()) <= {"code", "message", "details", "correlation_id"}
    assert data["code"] == "unauthenticated"
    assert data["message"] == "Not authenticated"


@pytest.mark.asyncio
async def test_error_contract_not_found_route(client):
    r = await client.get("/no-such-route")
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"
