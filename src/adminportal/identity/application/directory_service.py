"""
Tenant and user records: the CRUD needed around the access layer.

Authorization happens before these methods are called; they only enforce
existence and uniqueness.
"""
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from adminportal.identity.application.ports import PasswordHasher, UnitOfWork, UnitOfWorkFactory
from adminportal.identity.domain.entities.tenant import Tenant
from adminportal.identity.domain.entities.user import (
    AdminProfile,
    ClientUserProfile,
    SolutionsEngineerProfile,
    User,
    UserProfile,
)
from adminportal.identity.domain.roles import Role
from adminportal.shared.exceptions import ConflictError, NotFoundError, ValidationError
from adminportal.shared.logging import log_security_event


class DirectoryService:
    def __init__(self, uow_factory: UnitOfWorkFactory, *, hasher: PasswordHasher) -> None:
        self._uow_factory = uow_factory
        self._hasher = hasher

    # ─── Tenants ──────────────────────────────────────────────────────────

    async def create_tenant(
        self,
        name: str,
        *,
        company_url: Optional[str] = None,
        credit_balance: Decimal = Decimal("0"),
        pipeline_phase: Optional[str] = None,
    ) -> Tenant:
        tenant = Tenant(
            id=Tenant.new_id(),
            name=name.strip(),
            company_url=company_url,
            credit_balance=credit_balance,
            pipeline_phase=pipeline_phase,
        )
        async with self._uow_factory() as uow:
            if await uow.tenants.get_by_name(tenant.name) is not None:
                raise ConflictError("A client with this name already exists", details={"name": tenant.name})
            await uow.tenants.add(tenant)
            await uow.commit()
        return tenant

    async def get_tenant(self, tenant_id: str) -> Tenant:
        async with self._uow_factory() as uow:
            return await self._require_tenant(uow, tenant_id)

    async def list_tenant_engineers(self, tenant_id: str) -> List[User]:
        """Assigned engineers in tenant order (lead first)."""
        async with self._uow_factory() as uow:
            tenant = await self._require_tenant(uow, tenant_id)
            engineers = []
            for engineer_id in tenant.assigned_engineer_ids:
                user = await uow.users.get(engineer_id)
                if user is not None:
                    engineers.append(user)
            return engineers

    # ─── Users ────────────────────────────────────────────────────────────

    async def create_staff_user(
        self,
        *,
        name: str,
        email: str,
        role: Role,
        password: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> User:
        profile: UserProfile
        if role is Role.ADMIN:
            profile = AdminProfile()
        elif role is Role.SOLUTIONS_ENGINEER:
            profile = SolutionsEngineerProfile()
        else:
            raise ValidationError("Client users are created through their client", details={"role": role.value})
        return await self._create_user(name=name, email=email, profile=profile, password=password, phone=phone)

    async def list_client_users(self, tenant_id: str) -> List[User]:
        async with self._uow_factory() as uow:
            await self._require_tenant(uow, tenant_id)
            return await uow.users.list_client_users(tenant_id)

    async def create_client_user(
        self,
        tenant_id: str,
        *,
        name: str,
        email: str,
        password: Optional[str] = None,
        phone: Optional[str] = None,
        is_org_admin: bool = False,
        has_billing_access: bool = False,
    ) -> User:
        profile = ClientUserProfile(
            tenant_id=tenant_id,
            is_org_admin=is_org_admin,
            has_billing_access=has_billing_access,
        )
        return await self._create_user(name=name, email=email, profile=profile, password=password, phone=phone)

    async def delete_client_user(self, tenant_id: str, user_id: str, *, actor_id: str) -> None:
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            # users of other tenants look exactly like missing ones
            if user is None or user.tenant_id != tenant_id:
                raise NotFoundError("User not found", code="user_not_found")
            await uow.users.delete(user_id)
            await uow.commit()
        log_security_event(
            "client_user_deleted",
            user_id=user_id,
            tenant_id=tenant_id,
            details={"reason": "deleted_by_user", "actor_id": actor_id},
        )

    async def _create_user(
        self,
        *,
        name: str,
        email: str,
        profile: UserProfile,
        password: Optional[str],
        phone: Optional[str],
    ) -> User:
        user = User(
            id=User.new_id(),
            name=name.strip(),
            email=email,
            profile=profile,
            password=self._hasher.hash(password) if password else None,
            phone=phone,
        )
        async with self._uow_factory() as uow:
            if isinstance(profile, ClientUserProfile):
                await self._require_tenant(uow, profile.tenant_id)
            if await uow.users.get_by_email(user.email) is not None:
                raise ConflictError("A user with this email already exists", details={"email": user.email})
            await uow.users.add(user)
            await uow.commit()
        log_security_event("user_created", user_id=user.id, tenant_id=user.tenant_id, details={"role": user.role.value})
        return user

    async def _require_tenant(self, uow: UnitOfWork, tenant_id: str) -> Tenant:
        tenant = await uow.tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError("Client not found", code="tenant_not_found")
        return tenant
