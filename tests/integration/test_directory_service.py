import pytest

from adminportal.identity.application.assignment_service import EngineerAssignmentService
from adminportal.identity.domain.roles import Role
from adminportal.shared.exceptions import ConflictError, NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_tenant_names_are_unique_ignoring_case(directory):
    await directory.create_tenant("Acme Corp")
    with pytest.raises(ConflictError):
        await directory.create_tenant("  acme   CORP ")


@pytest.mark.asyncio
async def test_emails_are_unique_ignoring_case(directory):
    tenant = await directory.create_tenant("Acme")
    await directory.create_client_user(tenant.id, name="Pat", email="pat@acme.com")
    with pytest.raises(ConflictError):
        await directory.create_staff_user(name="Pat", email="PAT@acme.com", role=Role.ADMIN)


@pytest.mark.asyncio
async def test_client_user_needs_existing_tenant(directory):
    with pytest.raises(NotFoundError):
        await directory.create_client_user("missing", name="Pat", email="pat@acme.com")


@pytest.mark.asyncio
async def test_staff_route_cannot_create_client_users(directory):
    with pytest.raises(ValidationError):
        await directory.create_staff_user(name="Pat", email="pat@acme.com", role=Role.CLIENT_USER)


@pytest.mark.asyncio
async def test_password_material_is_stored_hashed(directory, uow_factory, hasher):
    admin = await directory.create_staff_user(
        name="Root", email="root@example.com", role=Role.ADMIN, password="correct-horse"
    )
    async with uow_factory() as uow:
        stored = await uow.users.get(admin.id)
    assert stored.password.hash != "correct-horse"
    assert hasher.verify("correct-horse", stored.password)


@pytest.mark.asyncio
async def test_delete_client_user_of_other_tenant_is_not_found(directory):
    acme = await directory.create_tenant("Acme")
    globex = await directory.create_tenant("Globex")
    user = await directory.create_client_user(globex.id, name="Pat", email="pat@globex.com")
    with pytest.raises(NotFoundError):
        await directory.delete_client_user(acme.id, user.id, actor_id="admin-1")
    assert [u.id for u in await directory.list_client_users(globex.id)] == [user.id]


@pytest.mark.asyncio
async def test_list_tenant_engineers_in_order(directory, uow_factory):
    tenant = await directory.create_tenant("Acme")
    first = await directory.create_staff_user(name="Ada", email="ada@example.com", role=Role.SOLUTIONS_ENGINEER)
    second = await directory.create_staff_user(name="Bo", email="bo@example.com", role=Role.SOLUTIONS_ENGINEER)
    service = EngineerAssignmentService(uow_factory)
    await service.assign(tenant.id, first.id)
    await service.assign(tenant.id, second.id)

    assert [u.id for u in await directory.list_tenant_engineers(tenant.id)] == [first.id, second.id]
