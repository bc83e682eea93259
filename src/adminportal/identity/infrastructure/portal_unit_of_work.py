"""
Portal Unit of Work
Users and tenants repositories sharing one session and one transaction
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adminportal.identity.application.ports import UnitOfWorkFactory
from adminportal.identity.infrastructure.persistence.repositories.tenant_repository import SqlTenantRepository
from adminportal.identity.infrastructure.persistence.repositories.user_repository import SqlUserRepository
from adminportal.shared.database.unit_of_work import SQLAlchemyUnitOfWork


class PortalUnitOfWork(SQLAlchemyUnitOfWork):
    """
    Usage:
        async with PortalUnitOfWork(database.session_factory) as uow:
            tenant = await uow.tenants.get(tenant_id)
            ...
            await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory)
        self._users: Optional[SqlUserRepository] = None
        self._tenants: Optional[SqlTenantRepository] = None

    @property
    def users(self) -> SqlUserRepository:
        if self._users is None:
            self._users = SqlUserRepository(self.session)
        return self._users

    @property
    def tenants(self) -> SqlTenantRepository:
        if self._tenants is None:
            self._tenants = SqlTenantRepository(self.session)
        return self._tenants

    def _reset_repositories(self) -> None:
        self._users = None
        self._tenants = None


def unit_of_work_factory(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWorkFactory:
    def _make() -> PortalUnitOfWork:
        return PortalUnitOfWork(session_factory)

    return _make
