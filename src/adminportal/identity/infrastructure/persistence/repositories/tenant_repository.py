"""
Tenant Repository Implementation
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from adminportal.identity.domain.entities.tenant import Tenant, normalize_tenant_name
from adminportal.identity.infrastructure.persistence import assignments
from adminportal.identity.infrastructure.persistence.models import TenantModel
from adminportal.shared.exceptions import ConflictError


class SqlTenantRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _to_entity(self, model: TenantModel) -> Tenant:
        return Tenant(
            id=model.id,
            name=model.name,
            assigned_engineer_ids=await assignments.engineer_ids_for_tenant(self._session, model.id),
            company_url=model.company_url,
            active_subscription_id=model.active_subscription_id,
            credit_balance=Decimal(model.credit_balance or 0),
            pipeline_phase=model.pipeline_phase,
            created_at=model.created_at,
        )

    async def get(self, tenant_id: str) -> Optional[Tenant]:
        result = await self._session.execute(select(TenantModel).where(TenantModel.id == tenant_id))
        model = result.scalar_one_or_none()
        return await self._to_entity(model) if model else None

    async def get_by_name(self, name: str) -> Optional[Tenant]:
        result = await self._session.execute(
            select(TenantModel).where(TenantModel.name_normalized == normalize_tenant_name(name))
        )
        model = result.scalar_one_or_none()
        return await self._to_entity(model) if model else None

    async def add(self, tenant: Tenant) -> Tenant:
        self._session.add(
            TenantModel(
                id=tenant.id,
                name=tenant.name.strip(),
                name_normalized=tenant.normalized_name,
                company_url=tenant.company_url,
                active_subscription_id=tenant.active_subscription_id,
                credit_balance=tenant.credit_balance,
                pipeline_phase=tenant.pipeline_phase,
            )
        )
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "A client with this name already exists",
                details={"name": tenant.name},
            ) from exc

        for engineer_id in tenant.assigned_engineer_ids:
            await assignments.link(self._session, tenant.id, engineer_id)
        return tenant

    async def delete(self, tenant_id: str) -> bool:
        await assignments.unlink_tenant_everywhere(self._session, tenant_id)
        result = await self._session.execute(delete(TenantModel).where(TenantModel.id == tenant_id))
        return bool(result.rowcount)

    async def assign_engineer(self, tenant_id: str, engineer_id: str) -> bool:
        return await assignments.link(self._session, tenant_id, engineer_id)

    async def unassign_engineer(self, tenant_id: str, engineer_id: str) -> bool:
        return await assignments.unlink(self._session, tenant_id, engineer_id)

    async def reorder_engineers(self, tenant_id: str, ordered_engineer_ids: Sequence[str]) -> None:
        await assignments.set_positions(self._session, tenant_id, ordered_engineer_ids)
