"""Rating model - a client's review of the admin who delivered their project."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now


class Rating(SQLModel, table=True):
    """One per completed project. Hidden ratings are kept but excluded from averages."""

    __tablename__ = "ratings"
    __table_args__ = (CheckConstraint("stars BETWEEN 1 AND 5", name="ck_ratings_stars_range"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", unique=True, ondelete="CASCADE")
    client_id: UUID = Field(foreign_key="users.id")
    admin_id: UUID = Field(foreign_key="users.id", index=True)
    stars: int
    comment: str | None = Field(default=None, max_length=2000)
    created_at: datetime = Field(default_factory=utc_now)
    hidden_at: datetime | None = Field(default=None)
    hidden_by_id: UUID | None = Field(default=None, foreign_key="users.id")
