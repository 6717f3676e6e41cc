"""Repository for Rating entity."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select

from src.app.models import Rating
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class RatingRepository(BaseRepository[Rating]):
    model = Rating

    async def get_for_project(self, project_id: UUID) -> Rating | None:
        result = await self.session.execute(select(Rating).where(Rating.project_id == project_id))
        return result.scalar_one_or_none()

    async def list_ratings(
        self,
        cursor: str | None = None,
        limit: int = 50,
        *,
        admin_id: UUID | None = None,
        client_id: UUID | None = None,
        include_hidden: bool = False,
    ) -> tuple[list[Rating], str | None, bool]:
        query = select(Rating)
        if admin_id is not None:
            query = query.where(Rating.admin_id == admin_id)
        if client_id is not None:
            query = query.where(Rating.client_id == client_id)
        if not include_hidden:
            query = query.where(Rating.hidden_at.is_(None))  # type: ignore[union-attr]
        return await self.paginate(query, cursor, limit, Rating.created_at)

    async def hide(self, rating_id: UUID, hidden_by: UUID) -> bool:
        """Hide a visible rating. False if it was already hidden."""
        return await self.update_where(
            rating_id,
            Rating.hidden_at.is_(None),  # type: ignore[union-attr]
            hidden_at=utc_now(),
            hidden_by_id=hidden_by,
        )

    async def admin_averages(self) -> list[tuple[UUID, int, Decimal]]:
        """(admin_id, rating count, average stars) over visible ratings, best first."""
        average = func.avg(Rating.stars)
        result = await self.session.execute(
            select(Rating.admin_id, func.count(), average)
            .where(Rating.hidden_at.is_(None))  # type: ignore[union-attr]
            .group_by(Rating.admin_id)
            .order_by(average.desc())
        )
        return [
            (admin_id, int(count), Decimal(str(avg)).quantize(Decimal("0.01")))
            for admin_id, count, avg in result.all()
        ]
