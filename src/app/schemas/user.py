from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.app.models import UserRole


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: str | None
    last_name: str | None
    full_name: str
    role: UserRole
    has_payment_method: bool
    created_at: datetime


class AdminSummary(BaseModel):
    """Minimal admin listing used when assigning projects."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    full_name: str
    role: UserRole
