"""
Engineer ↔ tenant assignment rows.

Every read and write of the assignment table goes through these helpers, so
the tenant's engineer list and the engineer's tenant list cannot diverge.
"""
from __future__ import annotations

from typing import Sequence, Tuple

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from adminportal.identity.infrastructure.persistence.models import EngineerAssignmentModel

A = EngineerAssignmentModel


async def engineer_ids_for_tenant(session: AsyncSession, tenant_id: str) -> Tuple[str, ...]:
    rows = await session.execute(
        select(A.engineer_id).where(A.tenant_id == tenant_id).order_by(A.position, A.created_at)
    )
    return tuple(rows.scalars().all())


async def tenant_ids_for_engineer(session: AsyncSession, engineer_id: str) -> Tuple[str, ...]:
    rows = await session.execute(
        select(A.tenant_id).where(A.engineer_id == engineer_id).order_by(A.created_at, A.tenant_id)
    )
    return tuple(rows.scalars().all())


async def link(session: AsyncSession, tenant_id: str, engineer_id: str) -> bool:
    """Append the engineer at the end of the tenant's list. False if already linked."""
    existing = await session.execute(
        select(A.engineer_id).where(A.tenant_id == tenant_id, A.engineer_id == engineer_id)
    )
    if existing.first() is not None:
        return False
    last = await session.execute(select(func.max(A.position)).where(A.tenant_id == tenant_id))
    max_position = last.scalar()
    await session.execute(
        insert(A).values(
            tenant_id=tenant_id,
            engineer_id=engineer_id,
            position=0 if max_position is None else max_position + 1,
        )
    )
    return True


async def unlink(session: AsyncSession, tenant_id: str, engineer_id: str) -> bool:
    result = await session.execute(
        delete(A)
        .where(A.tenant_id == tenant_id, A.engineer_id == engineer_id)
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)


async def unlink_engineer_everywhere(session: AsyncSession, engineer_id: str) -> int:
    result = await session.execute(
        delete(A).where(A.engineer_id == engineer_id).execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


async def unlink_tenant_everywhere(session: AsyncSession, tenant_id: str) -> int:
    result = await session.execute(
        delete(A).where(A.tenant_id == tenant_id).execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


async def set_positions(session: AsyncSession, tenant_id: str, ordered_engineer_ids: Sequence[str]) -> None:
    for position, engineer_id in enumerate(ordered_engineer_ids):
        await session.execute(
            update(A)
            .where(A.tenant_id == tenant_id, A.engineer_id == engineer_id)
            .values(position=position)
            .execution_options(synchronize_session=False)
        )
