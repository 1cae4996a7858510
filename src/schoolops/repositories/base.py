"""Base repository with common operations."""

from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from src.schoolops.schemas.pagination import decode_cursor, encode_cursor


def _parse_cursor_value(raw: str) -> datetime | UUID | str:
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return UUID(raw)
    except ValueError:
        return raw


ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Base repository providing common database operations.

    Repositories handle data access only. Transaction control (commit,
    rollback) belongs to the service layer.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)

    async def paginate(
        self,
        query: Any,  # SelectOfScalar - SQLModel/SQLAlchemy query
        cursor: str | None,
        limit: int,
        cursor_field: Any,
    ) -> tuple[list[ModelType], str | None, bool]:
        """Run keyset pagination on a query, newest first.

        Args:
            query: The base query to paginate
            cursor: Opaque cursor from the previous page, or None
            limit: Maximum number of items to return
            cursor_field: Column ordered on (e.g. created_at)

        Returns:
            Tuple of (items, next_cursor, has_more)
        """
        if cursor:
            try:
                query = query.where(cursor_field < _parse_cursor_value(decode_cursor(cursor)))
            except ValueError:
                # Unreadable cursor: start from the first page
                pass

        query = query.order_by(cursor_field.desc()).limit(limit + 1)
        result = await self.session.execute(query)
        items = list(result.scalars().all())

        has_more = len(items) > limit
        items = items[:limit]

        next_cursor = None
        if has_more and items:
            value = getattr(items[-1], cursor_field.key)
            if isinstance(value, datetime):
                next_cursor = encode_cursor(value.isoformat())
            elif value is not None:
                next_cursor = encode_cursor(str(value))

        return items, next_cursor, has_more
