"""Ledger Store access: one async engine per process.

Both the API and the sweep runner import this module. The sweep runner keeps
its pool open for hours between ticks, so connections are pinged on checkout.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the users mapping; everything else is raw SQL."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


async def check_connection() -> None:
    """Round-trip to the database and confirm the schema is migrated.

    Raises whatever the driver raises when the database is down, and a
    ProgrammingError when the migrations have not been applied.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1 FROM auctions LIMIT 1"))
