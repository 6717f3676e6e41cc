"""Interest request schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.app.models import InterestStatus


class InterestRequestCreate(BaseModel):
    project_id: UUID
    note: str | None = Field(default=None, max_length=1000)


class InterestRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    admin_id: UUID
    note: str | None
    status: InterestStatus
    decided_by_id: UUID | None
    created_at: datetime
    decided_at: datetime | None
