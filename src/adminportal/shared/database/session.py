"""
Database handle
Owns the async engine and session maker; built once per process and passed around explicitly
"""
from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from adminportal.shared.config import Settings
from adminportal.shared.database.base_model import Base
from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


class Database:
    """
    Explicit connection/pool handle.

    Constructed at process start (application lifespan or test fixture) and
    reached through ``app.state`` by request dependencies. Nothing in the
    package opens its own engine.
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ) -> None:
        """
        Initialize the engine and session maker.

        Args:
            database_url: Async SQLAlchemy URL (postgresql+asyncpg or sqlite+aiosqlite)
            echo: Whether to log SQL statements
            pool_size: Connection pool size (ignored for SQLite)
            max_overflow: Max overflow connections beyond pool_size (ignored for SQLite)
        """
        self.database_url = database_url

        engine_kwargs: dict = {"echo": echo}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)

        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "database_initialized",
            dialect=self.engine.dialect.name,
            pool_size=pool_size if "pool_size" in engine_kwargs else None,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        return cls(
            settings.database_url,
            echo=settings.debug,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_schema_ensured", tables=sorted(Base.metadata.tables))

    async def dispose(self) -> None:
        """Close all connections and dispose of the engine."""
        await self.engine.dispose()
        logger.info("database_disposed")
