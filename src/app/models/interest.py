"""Interest request model - a software admin asking to take on an unassigned project."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import InterestStatus


class InterestRequest(SQLModel, table=True):
    """Approving a request assigns the project to the requesting admin.

    An admin may have at most one pending request per project.
    """

    __tablename__ = "interest_requests"
    __table_args__ = (
        Index(
            "uq_interest_requests_one_pending",
            "project_id",
            "admin_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    admin_id: UUID = Field(foreign_key="users.id", index=True)
    note: str | None = Field(default=None, max_length=1000)
    status: str = Field(default=InterestStatus.PENDING.value, max_length=20)
    decided_by_id: UUID | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now)
    decided_at: datetime | None = Field(default=None)

    @property
    def status_enum(self) -> InterestStatus:
        return InterestStatus(self.status)
