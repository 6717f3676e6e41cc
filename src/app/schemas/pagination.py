"""Keyset pagination: response envelope and the opaque cursor format."""

import base64
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

T = TypeVar("T")

_SEPARATOR = "|"


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a newest-first listing.

    Pass ``next_cursor`` back unchanged to fetch the following page.
    """

    items: list[T]
    next_cursor: str | None = Field(
        default=None,
        description="Opaque cursor for fetching the next page. None if no more pages.",
    )
    has_more: bool = Field(
        default=False,
        description="Whether there are more items after this page.",
    )


def encode_cursor(position: datetime, row_id: UUID) -> str:
    """Encode the sort position of the last row on a page.

    The row id breaks ties between rows sharing a timestamp.
    """
    raw = f"{position.isoformat()}{_SEPARATOR}{row_id}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    """Inverse of ``encode_cursor``.

    Raises:
        ValueError: If the cursor was not produced by ``encode_cursor``.
    """
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        position, row_id = raw.split(_SEPARATOR)
        return datetime.fromisoformat(position), UUID(row_id)
    except (ValueError, UnicodeDecodeError) as e:
        raise ValueError("Invalid cursor") from e
