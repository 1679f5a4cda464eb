"""Postgres engine and sessions.

Request handlers receive a per-request session from ``get_async_session``.
The processing pipeline outlives the request that scheduled it, so it opens
its own sessions from ``async_session_maker`` through
``docinsight.repositories.scope``.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from docinsight.core.config import settings
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for documents, summaries, evaluations and feedback."""


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    echo=settings.database_echo,
    # asyncpg prepared statements do not survive PgBouncer transaction pooling
    connect_args={"statement_cache_size": 0},
)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session, closed once the response is sent."""
    async with async_session_maker() as session:
        yield session


async def database_status() -> dict:
    """Round-trip ``SELECT 1`` for the health endpoint; never raises."""
    try:
        async with engine.connect() as conn:
            await conn.scalar(text("SELECT 1"))
    except Exception as e:
        LOGGER.error("Database unreachable", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy"}


async def init_database(create_tables: bool = True) -> None:
    """Check connectivity and create any missing pipeline tables.

    Existing tables are left untouched; column changes need a real migration.
    """
    # Populates Base.metadata
    from docinsight.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if create_tables:
            await conn.run_sync(Base.metadata.create_all)

    LOGGER.info("Database ready", extra={"tables": sorted(Base.metadata.tables)})


async def close_database() -> None:
    """Release pooled connections at shutdown."""
    await engine.dispose()
    LOGGER.info("Database connections closed")
