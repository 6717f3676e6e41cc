"""Admin invite schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AdminInviteCreate(BaseModel):
    email: EmailStr


class AdminInviteAccept(BaseModel):
    token: str = Field(min_length=1, max_length=255)


class AdminInviteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    role: str
    status: str
    expires_at: datetime
    created_at: datetime


class AdminInviteInfo(BaseModel):
    """Public view shown on the admin signup page before accepting."""

    email: str
    role: str
    expires_at: datetime
