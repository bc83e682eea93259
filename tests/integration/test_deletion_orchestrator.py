import pytest
from structlog.testing import capture_logs

from adminportal.identity.application.assignment_service import EngineerAssignmentService
from adminportal.identity.application.deletion_orchestrator import CascadingDeletionOrchestrator
from adminportal.identity.domain.identity import Identity
from adminportal.identity.domain.roles import Role
from adminportal.identity.infrastructure.persistence.repositories.user_repository import SqlUserRepository
from adminportal.shared.exceptions import ForbiddenError, NotFoundError, TransactionFailureError, UnauthenticatedError

ADMIN = Identity(id="admin-1", role=Role.ADMIN)


@pytest.fixture
def orchestrator(uow_factory):
    return CascadingDeletionOrchestrator(uow_factory)


async def _seed(directory, uow_factory):
    tenant = await directory.create_tenant("Acme")
    other = await directory.create_tenant("Globex")
    engineer = await directory.create_staff_user(name="Sam", email="sam@example.com", role=Role.SOLUTIONS_ENGINEER)
    assignments = EngineerAssignmentService(uow_factory)
    await assignments.assign(tenant.id, engineer.id)
    await assignments.assign(other.id, engineer.id)
    users = [
        await directory.create_client_user(tenant.id, name=f"Client {i}", email=f"c{i}@acme.com")
        for i in range(2)
    ]
    outsider = await directory.create_client_user(other.id, name="Other", email="o@globex.com")
    return tenant, other, engineer, users, outsider


@pytest.mark.asyncio
async def test_delete_tenant_cascades(orchestrator, directory, uow_factory):
    tenant, other, engineer, users, outsider = await _seed(directory, uow_factory)

    result = await orchestrator.delete_tenant(tenant.id, ADMIN)

    assert result.deleted_user_count == 2
    assert result.unlinked_engineer_count == 1
    async with uow_factory() as uow:
        assert await uow.tenants.get(tenant.id) is None
        for user in users:
            assert await uow.users.get(user.id) is None
        remaining = await uow.users.get(engineer.id)
        assert remaining is not None
        assert remaining.profile.assigned_tenant_ids == (other.id,)
        assert await uow.users.get(outsider.id) is not None
        assert await uow.tenants.get(other.id) is not None


@pytest.mark.asyncio
async def test_failure_mid_cascade_changes_nothing(orchestrator, directory, uow_factory, monkeypatch):
    tenant, other, engineer, users, _ = await _seed(directory, uow_factory)

    async def explode(self, engineer_id, tenant_id):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(SqlUserRepository, "remove_assigned_tenant", explode)

    with pytest.raises(TransactionFailureError) as exc:
        await orchestrator.delete_tenant(tenant.id, ADMIN)
    assert exc.value.status_code == 500

    async with uow_factory() as uow:
        restored = await uow.tenants.get(tenant.id)
        assert restored is not None
        assert restored.assigned_engineer_ids == (engineer.id,)
        for user in users:
            assert await uow.users.get(user.id) is not None
        refreshed = await uow.users.get(engineer.id)
        assert set(refreshed.profile.assigned_tenant_ids) == {tenant.id, other.id}


@pytest.mark.asyncio
async def test_aborted_cascade_writes_no_user_deletion_audit(orchestrator, directory, uow_factory, monkeypatch):
    tenant, _, _, users, _ = await _seed(directory, uow_factory)

    async def explode(self, engineer_id, tenant_id):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(SqlUserRepository, "remove_assigned_tenant", explode)

    with capture_logs() as logs:
        with pytest.raises(TransactionFailureError):
            await orchestrator.delete_tenant(tenant.id, ADMIN)

    audit = [e.get("event_type") for e in logs if e["event"] == "security_event"]
    assert "client_user_deleted" not in audit
    assert "tenant_deleted" not in audit
    async with uow_factory() as uow:
        for user in users:
            assert await uow.users.get(user.id) is not None


@pytest.mark.asyncio
async def test_committed_cascade_audits_each_deleted_user(orchestrator, directory, uow_factory):
    tenant, _, _, users, _ = await _seed(directory, uow_factory)

    with capture_logs() as logs:
        await orchestrator.delete_tenant(tenant.id, ADMIN)

    deleted = [e["user_id"] for e in logs if e.get("event_type") == "client_user_deleted"]
    assert sorted(deleted) == sorted(u.id for u in users)
    assert any(e.get("event_type") == "tenant_deleted" for e in logs)


@pytest.mark.asyncio
async def test_missing_tenant_is_not_found(orchestrator, database):
    with pytest.raises(NotFoundError) as exc:
        await orchestrator.delete_tenant("missing", ADMIN)
    assert exc.value.message == "Client not found"


@pytest.mark.asyncio
async def test_only_admins_may_delete(orchestrator, directory, uow_factory):
    tenant = await directory.create_tenant("Acme")
    engineer = Identity(id="eng-1", role=Role.SOLUTIONS_ENGINEER)
    with pytest.raises(ForbiddenError):
        await orchestrator.delete_tenant(tenant.id, engineer)
    with pytest.raises(UnauthenticatedError):
        await orchestrator.delete_tenant(tenant.id, None)
    async with uow_factory() as uow:
        assert await uow.tenants.get(tenant.id) is not None
