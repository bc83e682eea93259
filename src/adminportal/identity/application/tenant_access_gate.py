"""
Tenant Access Gate

Row-level tenant scoping on top of the coarse role check. Assignment sets and
org-admin flags are read from storage on every call; nothing is cached.
"""
from __future__ import annotations

from typing import Optional

from adminportal.identity.domain.entities.user import ClientUserProfile, SolutionsEngineerProfile
from adminportal.identity.domain.identity import Identity
from adminportal.identity.domain.repositories import UserReader
from adminportal.identity.domain.roles import Role
from adminportal.shared.exceptions import ForbiddenError
from adminportal.shared.logging import get_logger

logger = get_logger(__name__)

TENANT_SCOPE_MESSAGE = "Forbidden: tenant scope required"
TENANT_USER_MANAGEMENT_MESSAGE = "Forbidden: tenant user management scope required"


class TenantAccessGate:
    def __init__(self, users: UserReader) -> None:
        self._users = users

    async def can_access_tenant(self, identity: Optional[Identity], tenant_id: str) -> bool:
        """
        Read-style access to one tenant's records.

        Admins pass for any tenant id, existing or not. Engineers pass for
        tenants in their stored assigned set. Client users pass for their own
        tenant only.
        """
        if identity is None:
            return False
        if identity.role is Role.ADMIN:
            return True
        if identity.role is Role.SOLUTIONS_ENGINEER:
            return await self._engineer_assigned(identity, tenant_id)
        if identity.role is Role.CLIENT_USER:
            return identity.tenant_id == tenant_id
        return False

    async def can_manage_tenant_users(self, identity: Optional[Identity], tenant_id: str) -> bool:
        """
        Same as ``can_access_tenant``, except that a client user must also be
        an org admin of that tenant according to their current stored record.
        """
        if identity is None:
            return False
        if identity.role is Role.ADMIN:
            return True
        if identity.role is Role.SOLUTIONS_ENGINEER:
            return await self._engineer_assigned(identity, tenant_id)
        if identity.role is Role.CLIENT_USER:
            if identity.tenant_id != tenant_id:
                return False
            user = await self._users.get(identity.id)
            profile = user.profile if user else None
            return (
                isinstance(profile, ClientUserProfile)
                and profile.tenant_id == tenant_id
                and profile.is_org_admin
            )
        return False

    async def require_tenant_access(self, identity: Optional[Identity], tenant_id: str) -> None:
        if not await self.can_access_tenant(identity, tenant_id):
            self._deny(identity, tenant_id, "read")
            raise ForbiddenError(TENANT_SCOPE_MESSAGE)

    async def require_tenant_user_management(self, identity: Optional[Identity], tenant_id: str) -> None:
        if not await self.can_manage_tenant_users(identity, tenant_id):
            self._deny(identity, tenant_id, "manage_users")
            raise ForbiddenError(TENANT_USER_MANAGEMENT_MESSAGE)

    async def _engineer_assigned(self, identity: Identity, tenant_id: str) -> bool:
        engineer = await self._users.get(identity.id)
        if engineer is None or not isinstance(engineer.profile, SolutionsEngineerProfile):
            return False
        return engineer.profile.is_assigned_to(tenant_id)

    def _deny(self, identity: Optional[Identity], tenant_id: str, scope: str) -> None:
        logger.info(
            "tenant_scope_denied",
            user_id=identity.id if identity else None,
            role=identity.role.value if identity else None,
            tenant_id=tenant_id,
            scope=scope,
        )
