"""Database engine, session factory and maintenance helpers.

The engine is created once per process. Creating it does not open a
connection, so a bad ``DATABASE_URL`` only surfaces on the first query.
"""
import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from courtwatch.core.config import settings

logger = logging.getLogger(__name__)

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields a database session.

    Usage:
        async def route(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create all tables that do not exist yet."""
    # Register every model on Base.metadata
    from courtwatch import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_connection(db: AsyncSession) -> bool:
    """Run a trivial round trip and report whether the expected scalar came back."""
    result = await db.execute(text("SELECT 1"))
    return result.scalar() == 1


async def vacuum(bind: Optional[AsyncEngine] = None) -> None:
    """
    Compact the database storage.

    VACUUM refuses to run inside a transaction on both SQLite and PostgreSQL,
    so it is issued on an autocommit connection.
    """
    async with (bind or engine).connect() as conn:
        conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
        await conn.execute(text("VACUUM"))
    logger.info("Database vacuumed")
