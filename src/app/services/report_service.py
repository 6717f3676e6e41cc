"""Aggregate totals for the admin reports page."""

from datetime import UTC, datetime
from typing import Any

from src.app.core.logging import get_logger
from src.app.models import InvoiceStatus, ProjectStatus, UserRole
from src.app.repositories import InvoiceRepository, ProjectRepository, TimeEntryRepository
from src.app.services.authorization import Session, require_role

logger = get_logger(__name__)


class ReportService:
    def __init__(
        self,
        project_repo: ProjectRepository,
        invoice_repo: InvoiceRepository,
        time_entry_repo: TimeEntryRepository,
    ):
        self.project_repo = project_repo
        self.invoice_repo = invoice_repo
        self.time_entry_repo = time_entry_repo

    async def summary(
        self, session: Session | None, since: datetime | None = None
    ) -> dict[str, Any]:
        """Project counts per status, hours logged, and invoice totals.

        Master admins get platform-wide totals. Software admins get totals over the
        projects assigned to them and the hours they logged.
        """
        session = require_role(session, UserRole.SOFTWARE_ADMIN, UserRole.MASTER_ADMIN)
        admin_id = None if session.role == UserRole.MASTER_ADMIN else session.user_id
        scope = "all" if admin_id is None else "assigned"
        if since is not None and since.tzinfo is not None:
            since = since.astimezone(UTC).replace(tzinfo=None)

        counts = await self.project_repo.count_by_status(admin_id, since)
        by_status = {s.value: counts.get(s.value, 0) for s in ProjectStatus}
        invoices = await self.invoice_repo.totals_by_status(admin_id, since)
        paid_count, paid_total = invoices.get(InvoiceStatus.PAID.value, (0, 0))
        outstanding = [
            invoices.get(s.value, (0, 0)) for s in (InvoiceStatus.PENDING, InvoiceStatus.FAILED)
        ]

        logger.debug("Report computed", scope=scope)
        return {
            "scope": scope,
            "since": since,
            "projects_by_status": by_status,
            "total_projects": sum(by_status.values()),
            "active_projects": sum(
                n for s, n in by_status.items() if not ProjectStatus(s).is_terminal
            ),
            "hours_logged": await self.time_entry_repo.sum_hours(admin_id, since),
            "invoices_paid": paid_count,
            "invoices_outstanding": sum(count for count, _ in outstanding),
            "revenue": paid_total,
            "outstanding_amount": sum(total for _, total in outstanding),
        }
