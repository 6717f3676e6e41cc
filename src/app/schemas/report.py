"""Reporting schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from src.app.schemas.redaction import RedactableRead
from src.app.schemas.types import HoursOutput


class ReportSummary(RedactableRead):
    """Totals over every project (master admins) or over the caller's assignments.

    Monetary totals are redacted for callers who may not see pricing.
    """

    redacted_fields = ("revenue", "outstanding_amount")

    scope: Literal["all", "assigned"]
    since: datetime | None
    projects_by_status: dict[str, int]
    total_projects: int
    active_projects: int
    hours_logged: HoursOutput
    invoices_paid: int
    invoices_outstanding: int
    revenue: int | None = Field(default=None, description="Paid invoices, in cents")
    outstanding_amount: int | None = Field(
        default=None, description="Pending and failed invoices, in cents"
    )
