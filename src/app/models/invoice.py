"""Invoice model."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import BigInteger
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import InvoiceStatus


class Invoice(SQLModel, table=True):
    """Amount owed for a project, fixed at creation.

    Only ``status``, ``paid_at`` and payment bookkeeping change afterwards.
    """

    __tablename__ = "invoices"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    amount: int = Field(sa_type=BigInteger)  # cents
    status: str = Field(default=InvoiceStatus.PENDING.value, max_length=20, index=True)

    # Billed-through watermark for hourly invoices
    hours_billed: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    billed_through: datetime | None = Field(default=None)

    payment_intent_id: str | None = Field(default=None, max_length=255, index=True)
    payment_attempts: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now)
    paid_at: datetime | None = Field(default=None)

    @property
    def status_enum(self) -> InvoiceStatus:
        return InvoiceStatus(self.status)
