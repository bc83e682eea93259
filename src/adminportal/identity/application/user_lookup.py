"""
Point reads of user records for identity resolution and tenant gates.
"""
from __future__ import annotations

from typing import Optional

from adminportal.identity.application.ports import UnitOfWorkFactory
from adminportal.identity.domain.entities.user import User


class UnitOfWorkUserReader:
    """Each lookup runs in its own unit of work, released before returning."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    async def get(self, user_id: str) -> Optional[User]:
        async with self._uow_factory() as uow:
            return await uow.users.get(user_id)
