"""Subscription package and subscription schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.app.models import SubscriptionStatus
from src.app.schemas.types import HoursInput, HoursOutput, MoneyInput


class PackageCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    monthly_price: MoneyInput
    hours_allotment: HoursInput


class PackageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    monthly_price: int
    hours_allotment: HoursOutput
    is_active: bool


class SubscriptionCreate(BaseModel):
    package_id: UUID


class SubscriptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    package_id: UUID
    status: SubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    hours_used: HoursOutput
