"""Repository for TimeEntry entity."""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, update
from sqlmodel import select

from src.app.models import TimeEntry
from src.app.repositories.base import BaseRepository


class TimeEntryRepository(BaseRepository[TimeEntry]):
    model = TimeEntry

    async def list_for_project(
        self, project_id: UUID, cursor: str | None = None, limit: int = 100
    ) -> tuple[list[TimeEntry], str | None, bool]:
        query = select(TimeEntry).where(TimeEntry.project_id == project_id)
        return await self.paginate(query, cursor, limit, TimeEntry.logged_at)

    async def list_unbilled(self, project_id: UUID) -> list[TimeEntry]:
        """Entries not yet attributed to an invoice, oldest first."""
        result = await self.session.execute(
            select(TimeEntry)
            .where(
                TimeEntry.project_id == project_id,
                TimeEntry.invoice_id.is_(None),  # type: ignore[union-attr]
            )
            .order_by(TimeEntry.logged_at)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def attribute_to_invoice(self, entry_ids: Sequence[UUID], invoice_id: UUID) -> int:
        """Mark entries as billed by ``invoice_id``. Already-billed entries are left alone.

        Returns:
            Number of entries attributed.
        """
        if not entry_ids:
            return 0
        result = await self.session.execute(
            update(TimeEntry)
            .where(
                TimeEntry.id.in_(entry_ids),  # type: ignore[attr-defined]
                TimeEntry.invoice_id.is_(None),  # type: ignore[union-attr]
            )
            .values(invoice_id=invoice_id)
            .returning(TimeEntry.id)
            .execution_options(synchronize_session=False)
        )
        return len(result.all())

    async def sum_hours(
        self, admin_id: UUID | None = None, since: datetime | None = None
    ) -> Decimal:
        """Hours logged, optionally only by ``admin_id`` and only since ``since``."""
        query = select(func.coalesce(func.sum(TimeEntry.hours_spent), 0))
        if admin_id is not None:
            query = query.where(TimeEntry.admin_id == admin_id)
        if since is not None:
            query = query.where(TimeEntry.logged_at >= since)
        result = await self.session.execute(query)
        return Decimal(str(result.scalar_one())).quantize(Decimal("0.01"))
