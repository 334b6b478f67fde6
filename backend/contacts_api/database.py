"""
Contact API — Database Engine & Session Management
====================================================

What:  Async SQLAlchemy engine construction, session factory, transactional
       session scope and startup helpers.
Why:   Centralizes all database connection logic in one place.
How:   The application lifespan calls `build_engine()` once, wraps it in a
       session factory and hands that to the ContactStore. Nothing here is
       created at import time, so tests can point the app at any database.
Who:   Used by the lifespan in main.py, by ContactStore and by the test suite.

Connection Pooling:
    PostgreSQL (asyncpg) gets a sized pool with pre-ping and hourly recycling.
    SQLite (aiosqlite) keeps SQLAlchemy's own defaults since pool sizing
    arguments do not apply to it.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from contacts_api.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic and `create_schema()`
    both read.
    """
    pass


# ── Engine & Session Factory ──────────────────────────────────────────────

def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the process-wide async engine from settings.

    Called exactly once per application lifespan; the resulting engine is
    the single long-lived connection handle shared by every request.
    """
    url = make_url(settings.database_url)
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        # SQL echo only when debugging; it is very noisy
        "echo": settings.log_level == "DEBUG",
    }
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create the session factory bound to `engine`.

    expire_on_commit=False keeps loaded attributes readable after commit,
    which the store relies on when it returns ORM instances to routes.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Provide a transactional session for one store operation.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller (the caller performs queries)
        3. On success: commits the transaction
        4. On error: rolls back and re-raises
        5. Always: closes the session (returns connection to pool)

    Example:
        async with session_scope(factory) as session:
            session.add(contact)
            await session.flush()
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────

async def verify_connection(engine: AsyncEngine) -> None:
    """
    Execute SELECT 1 to prove the database is reachable.

    Raises whatever the driver raises; the lifespan turns that into a fatal
    startup error.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_schema(engine: AsyncEngine) -> None:
    """Create any missing tables registered on `Base.metadata`."""
    # Register models on the metadata before create_all
    from contacts_api.models import contact  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured (%d tables)", len(Base.metadata.tables))
