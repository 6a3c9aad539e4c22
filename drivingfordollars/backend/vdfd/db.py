# vdfd/db.py
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .models import Base


def build_engine(db_url: str) -> AsyncEngine:
    return create_async_engine(db_url, echo=False, future=True)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Canonical async session factory. Callers hold on to the returned handle and
    pass it along; nothing here is process-global.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Idempotent: creates missing tables only."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
