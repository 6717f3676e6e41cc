"""Proposal model - a priced offer from an admin for a project."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Index, text
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import PricingType, ProposalStatus


class Proposal(SQLModel, table=True):
    """Exactly one pricing group is populated, matching ``pricing_type``.

    Superseded proposals are kept; at most one per project may be pending.
    """

    __tablename__ = "proposals"
    __table_args__ = (
        Index(
            "uq_proposals_one_pending_per_project",
            "project_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    author_id: UUID = Field(foreign_key="users.id")
    pricing_type: str = Field(max_length=20)

    # Hourly pricing
    hourly_rate: int | None = Field(default=None, sa_type=BigInteger)  # cents per hour
    estimated_hours: Decimal | None = Field(default=None, max_digits=8, decimal_places=2)

    # Flat-fee pricing
    fix_fee: int | None = Field(default=None, sa_type=BigInteger)  # cents

    notes: str | None = Field(default=None, max_length=2000)
    status: str = Field(default=ProposalStatus.PENDING.value, max_length=20)
    created_at: datetime = Field(default_factory=utc_now)
    decided_at: datetime | None = Field(default=None)

    @property
    def pricing_type_enum(self) -> PricingType:
        return PricingType(self.pricing_type)

    @property
    def status_enum(self) -> ProposalStatus:
        return ProposalStatus(self.status)
