"""
Family Cookbook Backend — Database Session Management
=======================================================

What:  Async SQLAlchemy engine, session factory, schema bootstrap and the
       FastAPI dependency that hands one session to each request.
How:   `Database` bundles the engine and its session factory. The application
       factory creates one instance and stores it on `app.state.database`;
       `get_db_session` pulls it from there, so handlers receive an injected
       store handle instead of importing a global engine.
When:  Engine is created with the app; sessions are created per request.

Connection Strategy:
    SQLite (default):  one file on local disk, SQLAlchemy's default pool.
    Server databases:  pool_size / max_overflow / pre_ping from settings,
                       connections recycled every hour.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cookbook.config import Settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (SQLite stores no offset)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this metadata, which `Database.create_all()`
    uses to create missing tables at startup.
    """
    pass


class Database:
    """
    Owns the async engine and session factory for one application instance.

    Usage:
        database = Database(settings)
        await database.create_all()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        engine_kwargs = {"echo": settings.log_level == "DEBUG"}

        if settings.is_sqlite:
            self._ensure_sqlite_directory(settings.database_url)
        else:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)

        # expire_on_commit=False: attributes stay readable after commit,
        # which the services rely on when building responses.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _ensure_sqlite_directory(database_url: str) -> None:
        database = make_url(database_url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self) -> None:
        """
        Create every table that does not exist yet.

        Idempotent: CREATE TABLE is only issued for missing tables, so this
        runs on every startup.
        """
        # Importing the models registers them with Base.metadata
        from cookbook import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready (%d tables)", len(Base.metadata.tables))

    async def ping(self) -> None:
        """Run SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections (called on shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the application's Database
        2. Yields it to the route handler
        3. On success: commits whatever the handler left pending
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns the connection to the pool)

    Example usage in a route:
        @router.get("/recipes")
        async def list_recipes(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
