"""
Spoonplan Database Layer
Async SQLAlchemy engine over SQLite (aiosqlite) for goals, ledgers and check-ins.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from spoonplan import models  # noqa: F401  (registers tables on SQLModel.metadata)
from spoonplan.config import settings

logger = logging.getLogger("spoonplan")


def _engine_kwargs() -> dict:
    """Get database-specific engine arguments."""
    if "sqlite" not in settings.db_url:
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in settings.db_url:
        # one shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_async_engine(
    settings.db_url,
    echo=settings.env == "dev" and settings.log_level == "DEBUG",
    future=True,
    **_engine_kwargs(),
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def create_db_and_tables():
    """Initialize database schema. Idempotent."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("database_ready", extra={"db_url": settings.db_url})


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with async_session() as session:
        yield session


async def verify_database_connection() -> dict:
    status = {"sqlite": False, "errors": []}
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        status["sqlite"] = True
    except Exception as e:
        status["errors"].append(f"SQLite: {e}")
    return status
