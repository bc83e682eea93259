"""
Ports the application services depend on; adapters live in infrastructure.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Protocol

from adminportal.identity.domain.entities.user import PasswordMaterial, User
from adminportal.identity.domain.repositories import TenantRepository, UserRepository


class SessionStoreError(Exception):
    """The legacy session store could not be read."""


class SessionStore(Protocol):
    async def get(self, session_token: str) -> Optional[Dict[str, Any]]: ...


class SessionTokenService(Protocol):
    def issue(self, user: User) -> str: ...

    def verify(self, token: str) -> Dict[str, Any]: ...


class PasswordHasher(Protocol):
    def hash(self, plain: str) -> PasswordMaterial: ...

    def verify(self, plain: str, material: PasswordMaterial) -> bool: ...


class ExternalIdentityProvider(Protocol):
    async def authenticate(self, email: str, password: str) -> bool: ...


class UnitOfWork(Protocol):
    """
    Users and tenants repositories sharing one transaction.

    Usage:
        async with uow_factory() as uow:
            tenant = await uow.tenants.get(tenant_id)
            ...
            await uow.commit()

    Leaving the block without ``commit()`` rolls everything back.
    """

    @property
    def users(self) -> UserRepository: ...

    @property
    def tenants(self) -> TenantRepository: ...

    async def __aenter__(self) -> UnitOfWork: ...

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


UnitOfWorkFactory = Callable[[], UnitOfWork]
