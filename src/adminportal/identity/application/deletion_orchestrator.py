"""
Cascading Deletion Orchestrator

Deletes a tenant together with its client users and its engineer links as one
all-or-nothing unit of work.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from adminportal.identity.application.ports import UnitOfWorkFactory
from adminportal.identity.application.role_authority import require_roles
from adminportal.identity.domain.identity import Identity
from adminportal.identity.domain.roles import ADMIN_ONLY
from adminportal.shared.exceptions import DomainError, NotFoundError, TransactionFailureError
from adminportal.shared.logging import get_logger, log_security_event

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeletionResult:
    tenant_id: str
    deleted_user_count: int
    unlinked_engineer_count: int


class CascadingDeletionOrchestrator:
    """
    Steps, inside a single transaction:

    1. load the tenant (NotFoundError before any write when absent)
    2. delete each client user of the tenant, one by one
    3. remove the tenant from every assigned engineer's set (engineers stay)
    4. delete the tenant
    5. commit, then write one audit event per deleted user

    Any non-domain failure from opening the transaction through commit rolls
    everything back and surfaces as TransactionFailureError.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    async def delete_tenant(self, tenant_id: str, acting_identity: Optional[Identity]) -> DeletionResult:
        actor = require_roles(acting_identity, ADMIN_ONLY)

        try:
            async with self._uow_factory() as uow:
                tenant = await uow.tenants.get(tenant_id)
                if tenant is None:
                    raise NotFoundError("Client not found", code="tenant_not_found")

                client_users = await uow.users.list_client_users(tenant_id)
                for user in client_users:
                    await uow.users.delete(user.id)

                unlinked = 0
                for engineer_id in tenant.assigned_engineer_ids:
                    if await uow.users.remove_assigned_tenant(engineer_id, tenant_id):
                        unlinked += 1

                await uow.tenants.delete(tenant_id)
                await uow.commit()
        except DomainError:
            raise
        except Exception as exc:
            logger.error(
                "tenant_deletion_aborted",
                tenant_id=tenant_id,
                actor_id=actor.id,
                error_type=exc.__class__.__name__,
                error=str(exc),
            )
            raise TransactionFailureError(
                "Client deletion failed; no changes were applied",
                details={"tenant_id": tenant_id},
            ) from exc

        for user in client_users:
            log_security_event(
                "client_user_deleted",
                user_id=user.id,
                tenant_id=tenant_id,
                details={"reason": "tenant_deleted", "actor_id": actor.id},
            )
        log_security_event(
            "tenant_deleted",
            user_id=actor.id,
            tenant_id=tenant_id,
            details={"deleted_user_count": len(client_users), "unlinked_engineer_count": unlinked},
        )
        return DeletionResult(
            tenant_id=tenant_id,
            deleted_user_count=len(client_users),
            unlinked_engineer_count=unlinked,
        )
