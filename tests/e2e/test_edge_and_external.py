import pytest


@pytest.mark.asyncio
async def test_invalid_session_cookie_is_rejected_at_the_edge(client):
    r = await client.get("/api/auth/me", headers={"Cookie": "auth-token=not-a-jwt"})
    assert r.status_code == 401
    assert r.json() == {
        "code": "authentication_failed",
        "message": "Authentication failed",
        "correlation_id": r.headers["x-request-id"],
    }


@pytest.mark.asyncio
async def test_health_is_public(client):
    r = await client.get("/health")
    assert r.status_code == 200, r.text
    assert r.json()["ok"] is True


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    r = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_external_api_key_gate(client, settings):
    r = await client.get("/api/external/ping")
    assert r.status_code == 401
    assert r.json()["code"] == "api_key_required"
    assert r.json()["details"] == {"header": "x-api-key"}

    r = await client.get("/api/external/ping", headers={"x-api-key": "wrong"})
    assert r.json()["code"] == "invalid_api_key"

    r = await client.get("/api/external/ping", headers={"x-api-key": settings.api_key})
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

    r = await client.get("/api/external/ping", params={"apiKey": settings.api_key})
    assert r.status_code == 200
