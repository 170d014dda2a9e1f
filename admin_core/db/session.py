# File: admin_core/db/session.py
"""
Async session management for the relational backend.

Usage:
    engine = create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)
    await init_models(engine)
"""

import logging
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from admin_core.core.config import Settings
from admin_core.db.models import Base

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings, url: Optional[str] = None) -> AsyncEngine:
    """
    Build the async engine for DATABASE_URL.

    In-memory SQLite needs a single shared connection or every session would
    see its own empty database.
    """
    database_url = url or settings.DATABASE_URL
    kwargs = {"echo": settings.DB_ECHO}

    if database_url.startswith("sqlite"):
        if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_async_engine(database_url, **kwargs)

    if database_url.startswith("sqlite"):
        # Enforce foreign keys like the server databases do
        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    logger.info(f"Relational engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Relational schema initialized")


async def drop_models(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
