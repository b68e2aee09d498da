"""
Database configuration and connection management.
"""

import time
from functools import lru_cache
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from src.config.logging import get_logger
from src.config.settings import settings

logger = get_logger(__name__)


def get_database_url() -> str:
    """Get database URL from settings."""
    return str(settings.DATABASE_URL)


def create_engine(database_url: str = None) -> AsyncEngine:
    """Create async SQLAlchemy engine."""
    url = database_url or get_database_url()

    if settings.ENVIRONMENT == "test" or url.startswith("sqlite"):
        return create_async_engine(
            url, echo=settings.DATABASE_ECHO, poolclass=NullPool, future=True
        )

    return create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        future=True,
    )


def get_async_session_factory(
    database_url: str = None,
) -> async_sessionmaker[AsyncSession]:
    """Get async session factory."""
    engine = create_engine(database_url)
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide session factory, created on first use."""
    return get_async_session_factory()


async def get_database_health() -> Dict[str, Any]:
    """Run a trivial query and report round-trip time."""
    start_time = time.time()
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "response_time_ms": (time.time() - start_time) * 1000,
        }
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}


async def close_database_connections() -> None:
    """Dispose the engine behind the cached session factory."""
    if get_session_factory.cache_info().currsize:
        await get_session_factory().kw["bind"].dispose()
        get_session_factory.cache_clear()
