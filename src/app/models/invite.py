"""Admin invite model - the only path to elevate a user's role."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import InviteStatus, UserRole


class AdminInvite(SQLModel, table=True):
    __tablename__ = "admin_invites"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, index=True)
    token_hash: str = Field(max_length=255, unique=True, index=True)
    role: str = Field(default=UserRole.SOFTWARE_ADMIN.value, max_length=20)
    invited_by_id: UUID = Field(foreign_key="users.id")
    status: str = Field(default=InviteStatus.PENDING.value, max_length=20)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)
    accepted_at: datetime | None = Field(default=None)
    accepted_by_id: UUID | None = Field(default=None, foreign_key="users.id")
