import pytest

from adminportal.identity.domain.roles import Role


@pytest.mark.asyncio
async def test_login_sets_session_cookie_and_me_works(client, directory):
    await directory.create_staff_user(name="Root", email="root@example.com", role=Role.ADMIN, password="correct-horse")

    r = await client.post("/api/auth/login", json={"email": "root@example.com", "password": "correct-horse"})
    assert r.status_code == 200, r.text
    assert r.json()["user"]["role"] == "ADMIN"
    set_cookie = r.headers["set-cookie"].lower()
    assert set_cookie.startswith("auth-token=")
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie
    assert "max-age=604800" in set_cookie

    token = r.cookies["auth-token"]
    r = await client.get("/api/auth/me", headers={"Cookie": f"auth-token={token}"})
    assert r.status_code == 200, r.text
    assert r.json()["user"]["email"] == "root@example.com"


@pytest.mark.asyncio
async def test_login_failure_is_401(client, directory):
    await directory.create_staff_user(name="Root", email="root@example.com", role=Role.ADMIN, password="correct-horse")
    r = await client.post("/api/auth/login", json={"email": "root@example.com", "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["code"] == "invalid_credentials"


@pytest.mark.asyncio
async def test_login_validation_error(client):
    r = await client.post("/api/auth/login", json={"email": "not-an-email"})
    assert r.status_code == 422
    assert r.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_logout_clears_cookie(client, directory, auth_headers):
    admin = await directory.create_staff_user(name="Root", email="root@example.com", role=Role.ADMIN)
    r = await client.post("/api/auth/logout", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert 'auth-token=""' in r.headers["set-cookie"] or "max-age=0" in r.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_me_for_deleted_account_is_401(client, user_factory, auth_headers):
    ghost = user_factory("ADMIN")
    r = await client.get("/api/auth/me", headers=auth_headers(ghost))
    assert r.status_code == 401
