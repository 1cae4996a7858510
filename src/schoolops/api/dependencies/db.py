"""Database session dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.schoolops.core.db import get_session


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session shared by the repositories of one request."""
    async with get_session() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]
