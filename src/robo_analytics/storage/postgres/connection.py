"""SQLAlchemy async engine and session management.

Provides a factory for async engines backed by asyncpg and an async
context manager for read sessions.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine(
    url: str,
    *,
    pool_size: int = 5,
    echo: bool = False,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """Create a new :class:`AsyncEngine`.

    Args:
        url: ``postgresql+asyncpg://`` connection URL.
        pool_size: Persistent connections kept in the pool.
        echo: If ``True``, log all emitted SQL statements.
        use_null_pool: Disable pooling (one-off CLI runs, tests).
    """
    pool_kwargs: dict = {}
    if use_null_pool:
        pool_kwargs["poolclass"] = NullPool
    else:
        pool_kwargs["pool_size"] = pool_size

    engine = create_async_engine(url, echo=echo, **pool_kwargs)
    logger.info("Created async engine for %s (pool_size=%s)", url.split("@")[-1], pool_size)
    return engine


async def init_engine(
    url: str,
    *,
    pool_size: int = 5,
    echo: bool = False,
) -> AsyncEngine:
    """Initialise the module-level engine and session factory."""
    global _engine, _session_factory  # noqa: PLW0603

    _engine = create_engine(url, pool_size=pool_size, echo=echo)
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return _engine


async def dispose() -> None:
    """Dispose of the module-level engine."""
    global _engine, _session_factory  # noqa: PLW0603

    if _engine is not None:
        await _engine.dispose()
        logger.info("Engine disposed.")
        _engine = None
        _session_factory = None


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a session that is always closed afterwards.

    Raises:
        RuntimeError: If :func:`init_engine` has not been called.
    """
    if _session_factory is None:
        raise RuntimeError(
            "Session factory not initialised. Call init_engine() first."
        )

    session = _session_factory()
    try:
        yield session
    finally:
        await session.close()
