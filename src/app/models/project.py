"""Project model - a client's code-fix request and its lifecycle state."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Index
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import ProjectStatus


class Project(SQLModel, table=True):
    """Project owned by a client, optionally assigned to an admin.

    ``status`` is only ever written through conditional updates guarded by the
    expected prior status (see ProjectRepository.transition).
    """

    __tablename__ = "projects"
    __table_args__ = (
        Index("ix_projects_client_created", "client_id", "created_at"),
        Index("ix_projects_admin_created", "assigned_admin_id", "created_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    client_id: UUID = Field(foreign_key="users.id", index=True)
    assigned_admin_id: UUID | None = Field(default=None, foreign_key="users.id", index=True)
    status: str = Field(default=ProjectStatus.SUBMITTED.value, max_length=20, index=True)

    # Intake
    title: str = Field(max_length=200)
    description: str = Field(max_length=5000)
    repository_url: str | None = Field(default=None, max_length=500)
    budget: int | None = Field(default=None, sa_type=BigInteger)  # cents

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    started_at: datetime | None = Field(default=None)
    completed_at: datetime | None = Field(default=None)
    cancelled_at: datetime | None = Field(default=None)

    @property
    def status_enum(self) -> ProjectStatus:
        return ProjectStatus(self.status)
