"""
Async SQLModel engine and session maker.
"""

from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings


def build_engine(database_url: str | None = None) -> AsyncEngine:
    return create_async_engine(
        database_url or settings.DATABASE_URL,
        echo=settings.ENV == "development" and settings.LOG_LEVEL == "DEBUG",
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """
    Called once at startup to create tables.
    In production you should run migrations instead.
    """
    # registers the table models on SQLModel.metadata
    import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
