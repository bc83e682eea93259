"""
User Repository Implementation
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from adminportal.identity.domain.entities.user import (
    AdminProfile,
    ClientUserProfile,
    PasswordMaterial,
    SolutionsEngineerProfile,
    User,
    normalize_email,
)
from adminportal.identity.domain.roles import Role, parse_role
from adminportal.identity.infrastructure.persistence import assignments
from adminportal.identity.infrastructure.persistence.models import UserModel
from adminportal.shared.exceptions import ConflictError


class SqlUserRepository:
    """
    User repository over the users table.

    Engineer profiles are hydrated with their assigned tenants from the
    assignment table on every load; nothing is cached between calls.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity"""
        role = parse_role(model.role)
        if role is Role.ADMIN:
            profile = AdminProfile()
        elif role is Role.SOLUTIONS_ENGINEER:
            profile = SolutionsEngineerProfile(
                assigned_tenant_ids=await assignments.tenant_ids_for_engineer(self._session, model.id)
            )
        elif role is Role.CLIENT_USER:
            profile = ClientUserProfile(
                tenant_id=model.tenant_id or "",
                is_org_admin=model.is_org_admin,
                has_billing_access=model.has_billing_access,
            )
        else:
            raise ValueError(f"User {model.id} has unknown role {model.role!r}")

        password = None
        if model.password_hash and model.password_salt:
            password = PasswordMaterial(hash=model.password_hash, salt=model.password_salt)

        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            profile=profile,
            password=password,
            phone=model.phone,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        """Convert domain entity to ORM model"""
        profile = entity.profile
        client = profile if isinstance(profile, ClientUserProfile) else None
        return UserModel(
            id=entity.id,
            name=entity.name,
            email=entity.email,
            phone=entity.phone,
            password_hash=entity.password.hash if entity.password else None,
            password_salt=entity.password.salt if entity.password else None,
            role=entity.role.value,
            tenant_id=client.tenant_id if client else None,
            is_org_admin=client.is_org_admin if client else False,
            has_billing_access=client.has_billing_access if client else False,
        )

    async def get(self, user_id: str) -> Optional[User]:
        result = await self._session.execute(select(UserModel).where(UserModel.id == user_id))
        model = result.scalar_one_or_none()
        return await self._to_entity(model) if model else None

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(UserModel).where(UserModel.email == normalize_email(email))
        )
        model = result.scalar_one_or_none()
        return await self._to_entity(model) if model else None

    async def add(self, user: User) -> User:
        self._session.add(self._to_model(user))
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "A user with this email already exists",
                details={"email": user.email},
            ) from exc

        if isinstance(user.profile, SolutionsEngineerProfile):
            for tenant_id in user.profile.assigned_tenant_ids:
                await assignments.link(self._session, tenant_id, user.id)
        return user

    async def delete(self, user_id: str) -> bool:
        await assignments.unlink_engineer_everywhere(self._session, user_id)
        result = await self._session.execute(delete(UserModel).where(UserModel.id == user_id))
        return bool(result.rowcount)

    async def list_client_users(self, tenant_id: str) -> List[User]:
        result = await self._session.execute(
            select(UserModel)
            .where(UserModel.tenant_id == tenant_id, UserModel.role == Role.CLIENT_USER.value)
            .order_by(UserModel.created_at, UserModel.email)
        )
        return [await self._to_entity(m) for m in result.scalars().all()]

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(UserModel))
        return int(result.scalar_one())

    async def remove_assigned_tenant(self, engineer_id: str, tenant_id: str) -> bool:
        """Drop one tenant from an engineer's assigned set. False when it was not there."""
        return await assignments.unlink(self._session, tenant_id, engineer_id)
