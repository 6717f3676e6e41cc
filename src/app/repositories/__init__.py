"""Repository layer - data access abstraction."""

from src.app.repositories.audit_repository import AuditLogRepository
from src.app.repositories.base import BaseRepository
from src.app.repositories.interest_repository import InterestRequestRepository
from src.app.repositories.invite_repository import AdminInviteRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.message_repository import MessageRepository
from src.app.repositories.project_repository import ProjectRepository
from src.app.repositories.proposal_repository import ProposalRepository
from src.app.repositories.rating_repository import RatingRepository
from src.app.repositories.subscription_repository import (
    SubscriptionPackageRepository,
    SubscriptionRepository,
)
from src.app.repositories.time_entry_repository import TimeEntryRepository
from src.app.repositories.user_repository import UserRepository

__all__ = [
    "AdminInviteRepository",
    "AuditLogRepository",
    "BaseRepository",
    "InterestRequestRepository",
    "InvoiceRepository",
    "MessageRepository",
    "ProjectRepository",
    "ProposalRepository",
    "RatingRepository",
    "SubscriptionPackageRepository",
    "SubscriptionRepository",
    "TimeEntryRepository",
    "UserRepository",
]
