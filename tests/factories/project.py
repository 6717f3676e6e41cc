"""Project, proposal, time entry and invoice factories."""

from decimal import Decimal

from polyfactory import Use

from src.app.models import (
    Invoice,
    InvoiceStatus,
    PricingType,
    Project,
    ProjectStatus,
    Proposal,
    ProposalStatus,
    TimeEntry,
)
from tests.factories.base import BaseFactory, generate_uuid, utc_now


class ProjectFactory(BaseFactory):
    __model__ = Project

    id = Use(generate_uuid)
    # FK fields - must be set explicitly
    client_id = None
    assigned_admin_id = None
    status = ProjectStatus.SUBMITTED.value
    title = Use(lambda: f"Fix checkout bug {generate_uuid().hex[:6]}")
    description = "Checkout fails with a 500 when the cart is empty."
    repository_url = "https://github.com/example/shop"
    budget = 100_000
    created_at = Use(utc_now)
    updated_at = Use(utc_now)
    started_at = None
    completed_at = None
    cancelled_at = None


class ProposalFactory(BaseFactory):
    __model__ = Proposal

    id = Use(generate_uuid)
    project_id = None
    author_id = None
    pricing_type = PricingType.FLAT_FEE.value
    hourly_rate = None
    estimated_hours = None
    fix_fee = 50_000
    notes = None
    status = ProposalStatus.PENDING.value
    created_at = Use(utc_now)
    decided_at = None

    @classmethod
    def hourly(cls, **kwargs):
        return cls.build(
            pricing_type=PricingType.HOURLY.value,
            hourly_rate=kwargs.pop("hourly_rate", 10_000),
            estimated_hours=kwargs.pop("estimated_hours", Decimal("8.00")),
            fix_fee=None,
            **kwargs,
        )


class TimeEntryFactory(BaseFactory):
    __model__ = TimeEntry

    id = Use(generate_uuid)
    project_id = None
    admin_id = None
    hours_spent = Decimal("1.50")
    description = "Investigated the failing request"
    logged_at = Use(utc_now)
    invoice_id = None


class InvoiceFactory(BaseFactory):
    __model__ = Invoice

    id = Use(generate_uuid)
    project_id = None
    amount = 50_000
    status = InvoiceStatus.PENDING.value
    hours_billed = None
    billed_through = None
    payment_intent_id = None
    payment_attempts = 0
    created_at = Use(utc_now)
    paid_at = None
