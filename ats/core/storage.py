"""Database connection and transaction handling."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ats.core.exceptions import TransientStoreError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _connect_args(url: str, lock_timeout: float) -> dict:
    """Driver-specific arguments bounding how long a row lock is awaited."""
    if url.startswith("sqlite"):
        return {"timeout": lock_timeout}
    if url.startswith("postgresql+asyncpg"):
        return {"server_settings": {"lock_timeout": str(int(lock_timeout * 1000))}}
    return {}


class Database:
    """Store handle owning the engine and session factory.

    Created once by the process entry point and passed to the services
    that need it.
    """

    def __init__(self, url: str, echo: bool = False, lock_timeout: float = 5.0):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            connect_args=_connect_args(url, lock_timeout),
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init_models(self) -> None:
        """Create tables that do not exist yet."""
        import ats.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Plain session for read-only queries."""
        try:
            async with self.session_factory() as session:
                yield session
        except (OperationalError, PoolTimeoutError) as e:
            logger.error(f"Store unavailable: {e}")
            raise TransientStoreError(str(e)) from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session inside a transaction.

        Commits when the block exits normally and rolls back on any
        exception, which is then re-raised.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except (OperationalError, PoolTimeoutError) as e:
            logger.error(f"Transaction aborted by store error: {e}")
            raise TransientStoreError(str(e)) from e

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
