"""Cursor pagination schema and cursor codec."""

import base64
import binascii
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """A page of items plus an opaque cursor for the next page.

    Clients pass ``nextCursor`` back unchanged to continue listing.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[T]
    next_cursor: str | None = Field(
        default=None,
        description="Opaque cursor for the next page. Null on the last page.",
    )
    has_more: bool = False


def encode_cursor(value: str) -> str:
    """Encode a cursor value (timestamp or id) as URL-safe base64."""
    return base64.urlsafe_b64encode(value.encode()).decode()


def decode_cursor(cursor: str) -> str:
    """Decode a cursor produced by encode_cursor.

    Raises:
        ValueError: If the cursor is not valid base64 text.
    """
    try:
        return base64.urlsafe_b64decode(cursor.encode()).decode()
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError("Invalid cursor") from e
