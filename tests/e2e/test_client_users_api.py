import pytest

from adminportal.identity.domain.roles import Role


@pytest.mark.asyncio
async def test_org_admin_manages_own_tenant_users(client, directory, auth_headers):
    tenant = await directory.create_tenant("Acme")
    org_admin = await directory.create_client_user(tenant.id, name="Pat", email="pat@acme.com", is_org_admin=True)
    headers = auth_headers(org_admin)

    r = await client.post(
        f"/api/client/{tenant.id}/users",
        json={"name": "Lou", "email": "lou@acme.com", "has_billing_access": True},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    created = r.json()["user"]
    assert created["tenant_id"] == tenant.id
    assert created["has_billing_access"] is True

    r = await client.get(f"/api/client/{tenant.id}/users", headers=headers)
    assert sorted(u["email"] for u in r.json()["users"]) == ["lou@acme.com", "pat@acme.com"]

    r = await client.delete(f"/api/client/{tenant.id}/users/{created['id']}", headers=headers)
    assert r.status_code == 204

    r = await client.delete(f"/api/client/{tenant.id}/users/{created['id']}", headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_plain_client_user_cannot_manage_users(client, directory, auth_headers):
    tenant = await directory.create_tenant("Acme")
    member = await directory.create_client_user(tenant.id, name="Pat", email="pat@acme.com")

    r = await client.get(f"/api/client/{tenant.id}/users", headers=auth_headers(member))
    assert r.status_code == 403
    assert r.json()["message"] == "Forbidden: tenant user management scope required"


@pytest.mark.asyncio
async def test_unassigned_engineer_cannot_manage_users(client, directory, auth_headers):
    tenant = await directory.create_tenant("Acme")
    engineer = await directory.create_staff_user(name="Sam", email="sam@example.com", role=Role.SOLUTIONS_ENGINEER)
    r = await client.get(f"/api/client/{tenant.id}/users", headers=auth_headers(engineer))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_deleted_client_token_no_longer_works(client, directory, auth_headers):
    tenant = await directory.create_tenant("Acme")
    org_admin = await directory.create_client_user(tenant.id, name="Pat", email="pat@acme.com", is_org_admin=True)
    headers = auth_headers(org_admin)
    await directory.delete_client_user(tenant.id, org_admin.id, actor_id="admin-1")

    r = await client.get(f"/api/client/{tenant.id}/users", headers=headers)
    assert r.status_code == 401
