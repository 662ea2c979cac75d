from __future__ import annotations
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import POSTGRES_URL
from .base import Base
from . import models_interview  # noqa: F401  (registers tables on Base.metadata)


# ───────────────────────── engine & session factory ─────────────────────────
engine = create_async_engine(POSTGRES_URL, echo=False)
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields one AsyncSession per request."""
    async with async_session() as session:
        yield session


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_session

# ───────────────────────── schema initialisation ────────────────────────────
async def init_models() -> None:
    """
    Creates all tables registered in Base.metadata if they do not exist yet.
    Safe to run repeatedly (idempotent).
    """
    async with engine.begin() as conn:
        # create_all is synchronous → run via run_sync
        await conn.run_sync(Base.metadata.create_all)
