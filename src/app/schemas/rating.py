"""Rating schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from src.app.schemas.user import AdminSummary


class RatingCreate(BaseModel):
    project_id: UUID
    stars: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)


class RatingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    client_id: UUID
    admin_id: UUID
    stars: int
    comment: str | None
    created_at: datetime
    hidden_at: datetime | None


class AdminRatingSummary(BaseModel):
    """Average of an admin's visible ratings."""

    admin: AdminSummary
    ratings: int
    average_stars: Annotated[Decimal, PlainSerializer(lambda v: f"{v:.2f}", return_type=str)]
