"""Async database engine and session management.

The engine is created once at import time. Two ways in:

- ``get_db``: request-scoped session for FastAPI routes.
- ``session_scope``: a standalone unit of work for Celery jobs, which run in
  their own event loop outside any request.

Both commit on success and roll back on error. Booking services also commit
mid-way, before they queue jobs or send emails, so the outer commit is often
a no-op.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from shelfbook.core.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_size=20,
    max_overflow=10,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session that commits when the block exits cleanly and rolls back otherwise."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session. Used as a FastAPI dependency."""
    async with session_scope() as session:
        yield session
