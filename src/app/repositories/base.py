"""Base repository with common CRUD operations."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import and_, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from src.app.core.exceptions import ValidationError
from src.app.schemas.pagination import decode_cursor, encode_cursor

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Base repository providing common database operations.

    Repositories handle data access only. Transaction control (commit)
    should be done in the service layer.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Get a record by its primary key."""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, id: UUID, *, read: bool = False) -> ModelType | None:
        """Get a record and lock its row until the transaction ends.

        ``read=True`` takes a shared lock (FOR SHARE) instead of an exclusive one.
        The returned object is refreshed from the row even if already in the session.
        """
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == id)  # type: ignore[attr-defined]
            .with_for_update(read=read)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)

    async def update_where(self, id: UUID, *conditions: Any, **values: Any) -> bool:
        """Conditionally update one row: ``UPDATE ... WHERE id = :id AND <conditions>``.

        The check and the write are a single statement, so the precondition is
        evaluated against the stored row rather than a previously read copy.

        Returns:
            True if the row matched and was updated, False otherwise.
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id, *conditions)  # type: ignore[attr-defined]
            .values(**values)
            .returning(self.model.id)  # type: ignore[attr-defined]
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def paginate(
        self,
        query: Any,  # SelectOfScalar or Select - SQLModel/SQLAlchemy query
        cursor: str | None,
        limit: int,
        cursor_field: Any,
    ) -> tuple[list[ModelType], str | None, bool]:
        """Execute keyset pagination on a query, newest first.

        Rows are ordered by ``(cursor_field, id)`` descending, so rows that share
        a timestamp are neither skipped nor repeated across pages.

        Args:
            query: The base SQLAlchemy query to paginate
            cursor: Optional cursor from the previous page
            limit: Maximum number of items to return
            cursor_field: Timestamp column to order by (e.g. created_at)

        Returns:
            Tuple of (items, next_cursor, has_more)

        Raises:
            ValidationError: If the cursor is malformed.
        """
        id_field = self.model.id  # type: ignore[attr-defined]
        if cursor:
            try:
                position, last_id = decode_cursor(cursor)
            except ValueError as e:
                raise ValidationError("That page cursor is invalid.") from e
            query = query.where(
                or_(
                    cursor_field < position,
                    and_(cursor_field == position, id_field < last_id),
                )
            )

        query = query.order_by(cursor_field.desc(), id_field.desc()).limit(limit + 1)

        result = await self.session.execute(query)
        items = list(result.scalars().all())

        has_more = len(items) > limit
        if has_more:
            items = items[:limit]

        next_cursor = None
        if has_more and items:
            last = items[-1]
            last_id = last.id  # type: ignore[attr-defined]
            next_cursor = encode_cursor(getattr(last, cursor_field.key), last_id)

        return items, next_cursor, has_more
