"""
Database layer — async SQLAlchemy 2.0 (asyncpg in production).

Provides:
    • Database — owns the async engine and session factory
    • Base model for ORM entities
    • Connectivity check used at startup and by /health

One Database instance is created in the app lifespan and handed to the
record store; nothing here is a module-level global.

Usage:
    database = Database(settings.DATABASE_URL)
    await database.connect()          # raises on failure

    async with database.session() as session:
        result = await session.execute(select(FirstAidRecord))
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


class Database:
    """Async engine + session factory for one database URL."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 5,
        echo: bool = False,
    ):
        self.url = url
        engine_kwargs = {"echo": echo}
        # SQLite (tests, local runs) does not take queue-pool sizing
        if not url.startswith("sqlite"):
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def display_url(self) -> str:
        """URL without credentials, safe for logs."""
        return self.url.split("@")[-1]

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; commit on success, roll back on error."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def connect(self, *, create_tables: bool = True) -> None:
        """Verify connectivity and optionally create missing tables."""
        await self.ping()
        if create_tables:
            # Import registers the ORM tables on Base.metadata
            from backend.lifeline.records import models  # noqa: F401

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connected: %s", self.display_url)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")
