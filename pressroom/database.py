"""
Pressroom Backend: Database Engine & Session Management
=======================================================

What:  Async SQLAlchemy engine factory, session factory, declarative Base and the
       per-request session dependency.
Why:   Centralizes all database connection logic in one place.
How:   `create_app()` calls `build_engine()` / `build_session_factory()` once and
       stores both on `app.state`. `get_db_session()` opens one session per request,
       commits on success and rolls back on error.

Connection Pooling Strategy:
    PostgreSQL (asyncpg): QueuePool with pool_size / max_overflow / pre_ping from settings.
    SQLite (aiosqlite):   NullPool. Every session gets its own connection, which lets
                          concurrent writers wait on SQLite's file lock instead of
                          sharing one connection's transaction.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from pressroom.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, `create_all()` and Alembic.
    """
    pass


# ── Engine / Session Factories ────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    if settings.is_sqlite:
        return create_async_engine(
            settings.database_url,
            poolclass=NullPool,
            echo=settings.log_level == "DEBUG",
        )

    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: response models are built from ORM objects after commit
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_all(engine: AsyncEngine) -> None:
    """
    Create every table registered on Base.metadata.

    Used by the test suite and by `auto_create_tables=True` in development.
    Production schemas are managed by Alembic.
    """
    # Import models so they register with Base before create_all runs
    from pressroom import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's session factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns the connection to the pool)

    Example usage in a route:
        @router.get("/posts")
        async def list_posts(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
