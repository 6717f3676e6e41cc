"""Model exports.

Import from here: `from src.app.models import Project, Proposal`
"""

from src.app.models.audit import AuditAction, AuditLog, AuditStatus
from src.app.models.enums import (
    InterestStatus,
    InviteStatus,
    InvoiceStatus,
    PricingType,
    ProjectStatus,
    ProposalStatus,
    SubscriptionStatus,
    UserRole,
)
from src.app.models.interest import InterestRequest
from src.app.models.invite import AdminInvite
from src.app.models.invoice import Invoice
from src.app.models.message import Message
from src.app.models.project import Project
from src.app.models.proposal import Proposal
from src.app.models.rating import Rating
from src.app.models.subscription import Subscription, SubscriptionPackage
from src.app.models.time_entry import TimeEntry
from src.app.models.user import User

__all__ = [
    # Enums
    "AuditAction",
    "AuditStatus",
    "InterestStatus",
    "InviteStatus",
    "InvoiceStatus",
    "PricingType",
    "ProjectStatus",
    "ProposalStatus",
    "SubscriptionStatus",
    "UserRole",
    # Models
    "AdminInvite",
    "AuditLog",
    "InterestRequest",
    "Invoice",
    "Message",
    "Project",
    "Proposal",
    "Rating",
    "Subscription",
    "SubscriptionPackage",
    "TimeEntry",
    "User",
]
