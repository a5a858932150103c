"""
Database configuration - SQLAlchemy 2.0 Async
Project: Catering Invoices

Engine and session factory for the SQL-backed invoice store.
Only used when ``storage_backend`` is ``"database"``.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from catering_invoices.core.config import Settings

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Engine Async SQLAlchemy 2.0
# ------------------------------------------------------------
def create_engine(database_url: str, *, echo: bool = False, pool_size: int = 5, max_overflow: int = 10) -> AsyncEngine:
    """
    Create the async engine for the given URL.

    SQLite URLs (used by the test-suite) get a single shared connection so
    that an in-memory database survives across sessions; every other URL
    gets a regular connection pool.

    Args:
        database_url: SQLAlchemy URL with an async driver
        echo: Log SQL statements
        pool_size: Persistent connections in the pool
        max_overflow: Extra connections beyond pool_size

    Returns:
        AsyncEngine: The configured engine
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
    )


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the engine described by the application settings."""
    return create_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


# ------------------------------------------------------------
# Session Factory
# ------------------------------------------------------------
def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to ``engine``."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Check the database connection and create missing tables.

    Raises:
        Exception: whatever the driver raises when the database is unreachable
    """
    # Registers every mapped class on Base.metadata
    from catering_invoices.models import Base

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connection established")
    except Exception as e:
        logger.error("Database connection error: %s", e)
        raise


async def close_db(engine: AsyncEngine) -> None:
    """
    Dispose of the engine connections.

    Called on application shutdown.
    """
    await engine.dispose()
    logger.info("Database connections closed")
