"""Time entry model - append-only ledger of admin hours per project."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now


class TimeEntry(SQLModel, table=True):
    """Hours logged by an admin.

    ``invoice_id`` is set once, when the entry is billed; unbilled entries have none.
    """

    __tablename__ = "time_entries"
    __table_args__ = (Index("ix_time_entries_project_unbilled", "project_id", "invoice_id"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    admin_id: UUID = Field(foreign_key="users.id")
    hours_spent: Decimal = Field(max_digits=8, decimal_places=2)
    description: str | None = Field(default=None, max_length=1000)
    logged_at: datetime = Field(default_factory=utc_now)
    invoice_id: UUID | None = Field(default=None, foreign_key="invoices.id")
