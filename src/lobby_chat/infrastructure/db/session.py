from __future__ import annotations

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lobby_chat.config import Settings
from lobby_chat.infrastructure.db import models  # noqa: F401
from lobby_chat.infrastructure.db.base import Base

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    assert settings.DATABASE_URL, "DATABASE_URL must be set to build an engine"
    kwargs: dict = {"pool_pre_ping": True, "echo": False}
    if not settings.DATABASE_URL.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return create_async_engine(settings.DATABASE_URL, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def init_schema_with_retry(
    engine: AsyncEngine,
    *,
    retries: int,
    delay: float,
) -> bool:
    """Create tables, retrying while the database comes up.

    Returns False once retries are exhausted; the service keeps running
    without durable history in that case.
    """
    for attempt in range(1, retries + 1):
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as exc:
            logger.error("Database init failed (attempt %d/%d): %s", attempt, retries, exc)
            if attempt < retries:
                await asyncio.sleep(delay)
            continue
        logger.info("Database schema ready")
        return True
    logger.error("Database unreachable after %d attempts; serving without history", retries)
    return False
