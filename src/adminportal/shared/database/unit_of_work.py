"""
SQLAlchemy Unit of Work
One session, one transaction; rolled back on exception or when not committed
"""
from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


class SQLAlchemyUnitOfWork:
    """
    SQLAlchemy-based Unit of Work implementation.

    Opens its own session from the session maker on enter and closes it on
    exit. Everything done through the session between enter and ``commit()``
    is atomic: an exception, or leaving the block without committing, rolls
    the transaction back before the session is released.

    Attributes:
        session: Async SQLAlchemy session (only valid inside the context)
        _committed: Flag tracking if transaction was committed
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Args:
            session_factory: Session maker owned by the process-wide Database handle
        """
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self._committed = False

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work used outside of its context")
        return self._session

    async def __aenter__(self) -> SQLAlchemyUnitOfWork:
        """
        Open a session and begin a transaction.

        Raises:
            Exception: Whatever the driver raises when the transaction cannot
                begin; the session is closed before re-raising.
        """
        session = self._session_factory()
        try:
            await session.begin()
        except Exception:
            await session.close()
            raise
        self._session = session
        self._committed = False
        logger.debug("uow_transaction_started")
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """
        Roll back if an exception occurred or nothing was committed, then close.
        """
        try:
            if exc_type is not None:
                await self.rollback()
                logger.warning("uow_rolled_back_on_exception", error=str(exc_val), error_type=exc_type.__name__)
            elif not self._committed:
                await self.rollback()
                logger.debug("uow_rolled_back_not_committed")
        finally:
            await self.session.close()
            self._session = None
            self._reset_repositories()

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            Exception: If commit fails (after rolling back)
        """
        try:
            await self.session.commit()
            self._committed = True
            logger.debug("uow_transaction_committed")
        except Exception as e:
            await self.rollback()
            logger.error("uow_commit_failed", error=str(e))
            raise

    async def rollback(self) -> None:
        """Discard all changes made within this unit of work."""
        try:
            await self.session.rollback()
            self._committed = False
        except Exception as e:
            logger.error("uow_rollback_failed", error=str(e))
            raise

    def _reset_repositories(self) -> None:
        """Hook for subclasses holding session-bound repositories."""
