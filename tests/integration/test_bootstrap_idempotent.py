import pytest

from adminportal.bootstrap import seed_initial_admin
from adminportal.identity.domain.roles import Role


@pytest.mark.asyncio
async def test_seed_creates_first_admin_once(uow_factory, hasher):
    admin = await seed_initial_admin(uow_factory, hasher, name="Root", email="Root@Example.com", password="pw-123456")
    assert admin is not None
    assert admin.role is Role.ADMIN

    again = await seed_initial_admin(uow_factory, hasher, name="Other", email="other@example.com", password="pw-123456")
    assert again is None

    async with uow_factory() as uow:
        assert await uow.users.count() == 1
        stored = await uow.users.get_by_email("root@example.com")
    assert hasher.verify("pw-123456", stored.password)
