"""Time entry, invoice and payment schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.app.models import InvoiceStatus
from src.app.schemas.redaction import RedactableRead
from src.app.schemas.types import HoursInput, HoursOutput


class TimeEntryCreate(BaseModel):
    hours_spent: HoursInput
    description: str | None = Field(default=None, max_length=1000)

    @field_validator("hours_spent")
    @classmethod
    def validate_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Hours must be greater than zero")
        return v


class TimeEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    admin_id: UUID
    hours_spent: HoursOutput
    description: str | None
    logged_at: datetime
    invoice_id: UUID | None


class InvoiceRead(RedactableRead):
    redacted_fields = ("amount",)

    id: UUID
    project_id: UUID
    amount: int | None = None
    status: InvoiceStatus
    hours_billed: HoursOutput | None
    billed_through: datetime | None
    payment_attempts: int
    created_at: datetime
    paid_at: datetime | None


class InvoiceCreateResult(BaseModel):
    """``invoice`` is null when there were no unbilled hours."""

    invoice: InvoiceRead | None
    created: bool


class PaymentIntentResponse(BaseModel):
    """Either a client secret for the hosted payment element or requires-setup."""

    model_config = ConfigDict(populate_by_name=True)

    client_secret: str | None = Field(default=None, alias="clientSecret")
    requires_setup: bool = Field(default=False, alias="requiresSetup")
    error: str | None = None


class SetupIntentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(alias="clientSecret")
    customer_id: str = Field(alias="customerId")


class WebhookAck(BaseModel):
    received: bool = True
    outcome: str
