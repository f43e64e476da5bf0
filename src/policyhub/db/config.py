"""Database configuration and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from policyhub.config.settings import Settings, get_settings

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def configure_database(settings: Settings | None = None) -> AsyncEngine:
    """Create the engine and session factory from settings.

    Replaces any previously configured engine without disposing it; call
    close_db() first when reconfiguring a live application.
    """
    global _engine, _sessionmaker

    if settings is None:
        settings = get_settings()

    engine_kwargs: dict = {"echo": settings.DEBUG}
    if settings.DATABASE_URL.startswith("sqlite"):
        engine_kwargs["poolclass"] = NullPool
    elif settings.ENVIRONMENT == "test":
        engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_size"] = settings.DATABASE_POOL_SIZE
        engine_kwargs["max_overflow"] = settings.DATABASE_MAX_OVERFLOW

    _engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)
    _sessionmaker = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    return _engine


def get_engine() -> AsyncEngine:
    """Return the configured engine, creating it from global settings if needed."""
    if _engine is None:
        configure_database()
    assert _engine is not None
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return the session factory, creating it from global settings if needed."""
    if _sessionmaker is None:
        configure_database()
    assert _sessionmaker is not None
    return _sessionmaker


async def init_db() -> None:
    """Initialize the database connection pool.

    Called during application startup to ensure the database is reachable
    before accepting requests.
    """
    async with get_engine().begin() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    """Close database connections gracefully.

    Called during application shutdown to release all pooled connections.
    """
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to inject database sessions.

    Usage:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with get_sessionmaker()() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Run a block as one transaction.

    Any transaction the session autobegan for earlier reads is committed
    first, so the block always starts on a fresh transaction. The block is
    committed on success and rolled back if it raises.

    Usage:
        async with atomic(db):
            db.add(org)
            db.add(portal)
    """
    if session.in_transaction():
        await session.commit()
    async with session.begin():
        yield session
