"""Repository for Invoice entity."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select

from src.app.models import Invoice, InvoiceStatus, Project
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository

OUTSTANDING_STATUSES = (InvoiceStatus.PENDING.value, InvoiceStatus.FAILED.value)


class InvoiceRepository(BaseRepository[Invoice]):
    model = Invoice

    async def list_for_project(self, project_id: UUID) -> list[Invoice]:
        result = await self.session.execute(
            select(Invoice)
            .where(Invoice.project_id == project_id)
            .order_by(Invoice.created_at.desc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def count_outstanding(self, project_id: UUID) -> int:
        """Invoices still awaiting payment (pending or failed)."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Invoice)
            .where(
                Invoice.project_id == project_id,
                Invoice.status.in_(OUTSTANDING_STATUSES),  # type: ignore[attr-defined]
            )
        )
        return int(result.scalar_one())

    async def get_by_payment_intent(self, payment_intent_id: str) -> Invoice | None:
        result = await self.session.execute(
            select(Invoice).where(Invoice.payment_intent_id == payment_intent_id)
        )
        return result.scalar_one_or_none()

    async def attach_payment_intent(self, invoice_id: UUID, payment_intent_id: str) -> bool:
        return await self.update_where(
            invoice_id,
            Invoice.status.in_(OUTSTANDING_STATUSES),  # type: ignore[attr-defined]
            payment_intent_id=payment_intent_id,
        )

    async def mark_paid(self, invoice_id: UUID) -> bool:
        """pending|failed -> paid. False if the invoice was already paid."""
        return await self.update_where(
            invoice_id,
            Invoice.status.in_(OUTSTANDING_STATUSES),  # type: ignore[attr-defined]
            status=InvoiceStatus.PAID.value,
            paid_at=utc_now(),
        )

    async def mark_failed(self, invoice_id: UUID, payment_intent_id: str) -> bool:
        """Record a failed attempt for the intent currently attached to the invoice.

        Detaches the intent and bumps ``payment_attempts`` so the next attempt gets
        a fresh idempotency key. A repeated failure event for the same intent no
        longer matches and is a no-op.
        """
        return await self.update_where(
            invoice_id,
            Invoice.status.in_(OUTSTANDING_STATUSES),  # type: ignore[attr-defined]
            Invoice.payment_intent_id == payment_intent_id,
            status=InvoiceStatus.FAILED.value,
            payment_intent_id=None,
            payment_attempts=Invoice.payment_attempts + 1,
        )

    async def totals_by_status(
        self, admin_id: UUID | None = None, since: datetime | None = None
    ) -> dict[str, tuple[int, int]]:
        """Invoice count and summed amount (cents) per status.

        ``admin_id`` limits the totals to projects assigned to that admin.
        """
        query = select(
            Invoice.status, func.count(), func.coalesce(func.sum(Invoice.amount), 0)
        ).group_by(Invoice.status)
        if admin_id is not None:
            query = query.join(Project, Project.id == Invoice.project_id).where(
                Project.assigned_admin_id == admin_id
            )
        if since is not None:
            query = query.where(Invoice.created_at >= since)
        result = await self.session.execute(query)
        return {status: (int(count), int(total)) for status, count, total in result.all()}
