"""Shared enums for models."""

from enum import Enum


class UserRole(str, Enum):
    """Closed set of marketplace roles."""

    CLIENT = "client"
    SOFTWARE_ADMIN = "software_admin"
    MASTER_ADMIN = "master_admin"

    @property
    def is_admin(self) -> bool:
        return self in (UserRole.SOFTWARE_ADMIN, UserRole.MASTER_ADMIN)


class ProjectStatus(str, Enum):
    """Project lifecycle states."""

    SUBMITTED = "submitted"
    ASSIGNED = "assigned"
    PROPOSED = "proposed"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ProjectStatus.COMPLETED, ProjectStatus.CANCELLED)


class PricingType(str, Enum):
    HOURLY = "hourly"
    FLAT_FEE = "flat_fee"


class ProposalStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class InviteStatus(str, Enum):
    """Admin invite status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class InterestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
