"""Proposal schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from src.app.models import PricingType, ProposalStatus
from src.app.schemas.redaction import RedactableRead
from src.app.schemas.types import HoursInput, HoursOutput, MoneyInput


def pricing_error(
    pricing_type: PricingType,
    hourly_rate: int | None,
    estimated_hours: Decimal | None,
    fix_fee: int | None,
) -> str | None:
    """Return why the pricing fields don't match ``pricing_type``, or None if they do."""
    hourly_given = hourly_rate is not None or estimated_hours is not None
    if pricing_type == PricingType.HOURLY:
        if hourly_rate is None or estimated_hours is None:
            return "Hourly proposals need both an hourly rate and an hours estimate."
        if fix_fee is not None:
            return "Hourly proposals can't include a flat fee."
        if hourly_rate <= 0:
            return "Hourly rate must be greater than zero."
        return None
    if fix_fee is None:
        return "Flat-fee proposals need a fee."
    if hourly_given:
        return "Flat-fee proposals can't include an hourly rate or hours estimate."
    if fix_fee <= 0:
        return "Fee must be greater than zero."
    return None


class ProposalCreate(BaseModel):
    pricing_type: PricingType
    hourly_rate: MoneyInput | None = None
    estimated_hours: HoursInput | None = None
    fix_fee: MoneyInput | None = None
    notes: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def validate_pricing(self) -> Self:
        error = pricing_error(
            self.pricing_type, self.hourly_rate, self.estimated_hours, self.fix_fee
        )
        if error:
            raise ValueError(error)
        return self


class ProposalRead(RedactableRead):
    redacted_fields = ("hourly_rate", "estimated_hours", "fix_fee")

    id: UUID
    project_id: UUID
    author_id: UUID
    pricing_type: PricingType
    hourly_rate: int | None = None
    estimated_hours: HoursOutput | None = None
    fix_fee: int | None = None
    notes: str | None
    status: ProposalStatus
    created_at: datetime
    decided_at: datetime | None
