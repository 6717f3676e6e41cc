"""Subscription packages - monthly plans with an hours allotment."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import BigInteger
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import SubscriptionStatus


class SubscriptionPackage(SQLModel, table=True):
    __tablename__ = "subscription_packages"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100, unique=True)
    description: str | None = Field(default=None, max_length=1000)
    monthly_price: int = Field(sa_type=BigInteger)  # cents
    hours_allotment: Decimal = Field(max_digits=8, decimal_places=2)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)


class Subscription(SQLModel, table=True):
    """A client's subscription; ``hours_used`` resets every period."""

    __tablename__ = "subscriptions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    client_id: UUID = Field(foreign_key="users.id", index=True)
    package_id: UUID = Field(foreign_key="subscription_packages.id")
    status: str = Field(default=SubscriptionStatus.ACTIVE.value, max_length=20)
    current_period_start: datetime
    current_period_end: datetime
    hours_used: Decimal = Field(default=Decimal("0"), max_digits=8, decimal_places=2)
    created_at: datetime = Field(default_factory=utc_now)
