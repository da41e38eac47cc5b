"""Database connection management for voicejournal."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from voicejournal.config import settings


def _engine_options(database_url: str) -> dict:
    """Pool options for the configured backend."""
    if database_url.startswith("sqlite"):
        return {"echo": False}
    return {
        "echo": False,
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
    }


# Create async engine
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def get_engine():
    """Get the database engine."""
    return engine


def session_scope(factory: async_sessionmaker):
    """Build a ``get_session``-style context manager over another session factory."""

    @asynccontextmanager
    async def _scope() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _scope


get_session = session_scope(async_session_factory)
get_session.__doc__ = "Get an async database session that commits on exit."


async def init_db() -> None:
    """Initialize database tables."""
    # Import models so they register with SQLModel.metadata
    import voicejournal.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
