"""
Engineer ↔ tenant assignment management.
"""
from __future__ import annotations

from typing import Sequence, Tuple

from adminportal.identity.application.ports import UnitOfWork, UnitOfWorkFactory
from adminportal.identity.domain.entities.tenant import Tenant
from adminportal.identity.domain.entities.user import SolutionsEngineerProfile
from adminportal.shared.exceptions import NotFoundError, ValidationError
from adminportal.shared.logging import log_security_event


class EngineerAssignmentService:
    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    async def assign(self, tenant_id: str, engineer_id: str) -> Tenant:
        """Append an engineer to a tenant (no-op when already assigned)."""
        async with self._uow_factory() as uow:
            await self._require_tenant(uow, tenant_id)
            await self._require_engineer(uow, engineer_id)
            changed = await uow.tenants.assign_engineer(tenant_id, engineer_id)
            tenant = await self._require_tenant(uow, tenant_id)
            await uow.commit()
        if changed:
            log_security_event("engineer_assigned", user_id=engineer_id, tenant_id=tenant_id)
        return tenant

    async def unassign(self, tenant_id: str, engineer_id: str) -> Tenant:
        """Remove an engineer from a tenant (no-op when not assigned)."""
        async with self._uow_factory() as uow:
            await self._require_tenant(uow, tenant_id)
            changed = await uow.tenants.unassign_engineer(tenant_id, engineer_id)
            tenant = await self._require_tenant(uow, tenant_id)
            await uow.commit()
        if changed:
            log_security_event("engineer_unassigned", user_id=engineer_id, tenant_id=tenant_id)
        return tenant

    async def replace_engineers(self, tenant_id: str, engineer_ids: Sequence[str]) -> Tenant:
        """
        Make the tenant's engineer list exactly ``engineer_ids``, in that order.

        Engineers no longer listed are unlinked on both sides, new ones are
        linked, and the first id becomes the lead. One transaction.
        """
        desired: Tuple[str, ...] = tuple(dict.fromkeys(engineer_ids))
        async with self._uow_factory() as uow:
            current = await self._require_tenant(uow, tenant_id)
            for engineer_id in desired:
                await self._require_engineer(uow, engineer_id)

            removed = [e for e in current.assigned_engineer_ids if e not in desired]
            added = [e for e in desired if not current.has_engineer(e)]
            for engineer_id in removed:
                await uow.tenants.unassign_engineer(tenant_id, engineer_id)
            for engineer_id in added:
                await uow.tenants.assign_engineer(tenant_id, engineer_id)
            await uow.tenants.reorder_engineers(tenant_id, desired)

            tenant = await self._require_tenant(uow, tenant_id)
            await uow.commit()

        if removed or added:
            log_security_event(
                "engineer_assignments_replaced",
                tenant_id=tenant_id,
                details={"added": added, "removed": removed},
            )
        return tenant

    async def _require_tenant(self, uow: UnitOfWork, tenant_id: str) -> Tenant:
        tenant = await uow.tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Client not found", code="tenant_not_found")
        return tenant

    async def _require_engineer(self, uow: UnitOfWork, engineer_id: str) -> None:
        user = await uow.users.get(engineer_id)
        if user is None:
            raise NotFoundError("Solutions engineer not found", code="user_not_found", details={"user_id": engineer_id})
        if not isinstance(user.profile, SolutionsEngineerProfile):
            raise ValidationError(
                "User is not a solutions engineer",
                details={"user_id": engineer_id, "role": user.role.value},
            )
