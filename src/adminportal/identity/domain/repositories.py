"""
Repository ports for the identity context.

Both sides of the engineer ↔ tenant assignment are projections of the same
stored assignment rows, so a write through either repository is visible from
the other inside the same unit of work.
"""
from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from adminportal.identity.domain.entities.tenant import Tenant
from adminportal.identity.domain.entities.user import User


class UserReader(Protocol):
    async def get(self, user_id: str) -> Optional[User]: ...


class UserRepository(UserReader, Protocol):
    async def get_by_email(self, email: str) -> Optional[User]: ...

    async def add(self, user: User) -> User: ...

    async def delete(self, user_id: str) -> bool: ...

    async def list_client_users(self, tenant_id: str) -> List[User]: ...

    async def count(self) -> int: ...

    async def remove_assigned_tenant(self, engineer_id: str, tenant_id: str) -> bool: ...


class TenantRepository(Protocol):
    async def get(self, tenant_id: str) -> Optional[Tenant]: ...

    async def get_by_name(self, name: str) -> Optional[Tenant]: ...

    async def add(self, tenant: Tenant) -> Tenant: ...

    async def delete(self, tenant_id: str) -> bool: ...

    async def assign_engineer(self, tenant_id: str, engineer_id: str) -> bool: ...

    async def unassign_engineer(self, tenant_id: str, engineer_id: str) -> bool: ...

    async def reorder_engineers(self, tenant_id: str, ordered_engineer_ids: Sequence[str]) -> None: ...
