"""Database session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.schoolops.core.db.engine import get_session_factory


@asynccontextmanager
async def get_session(engine: AsyncEngine | None = None) -> AsyncGenerator[AsyncSession, None]:
    """Open a session on the shared factory, or on ``engine`` when given (tests)."""
    if engine is not None:
        session = AsyncSession(engine, expire_on_commit=False, autoflush=False)
    else:
        session = get_session_factory()()

    async with session:
        yield session
