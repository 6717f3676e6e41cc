from src.app.schemas.audit import AuditLogRead
from src.app.schemas.billing import (
    InvoiceCreateResult,
    InvoiceRead,
    PaymentIntentResponse,
    SetupIntentResponse,
    TimeEntryCreate,
    TimeEntryRead,
    WebhookAck,
)
from src.app.schemas.interest import InterestRequestCreate, InterestRequestRead
from src.app.schemas.invite import (
    AdminInviteAccept,
    AdminInviteCreate,
    AdminInviteInfo,
    AdminInviteRead,
)
from src.app.schemas.message import MessageCreate, MessageRead
from src.app.schemas.pagination import PaginatedResponse
from src.app.schemas.project import ProjectAssign, ProjectCreate, ProjectRead
from src.app.schemas.proposal import ProposalCreate, ProposalRead
from src.app.schemas.rating import AdminRatingSummary, RatingCreate, RatingRead
from src.app.schemas.report import ReportSummary
from src.app.schemas.subscription import (
    PackageCreate,
    PackageRead,
    SubscriptionCreate,
    SubscriptionRead,
)
from src.app.schemas.user import AdminSummary, UserRead

__all__ = [
    # Audit
    "AuditLogRead",
    # Billing
    "InvoiceCreateResult",
    "InvoiceRead",
    "PaymentIntentResponse",
    "SetupIntentResponse",
    "TimeEntryCreate",
    "TimeEntryRead",
    "WebhookAck",
    # Interest requests
    "InterestRequestCreate",
    "InterestRequestRead",
    # Invites
    "AdminInviteAccept",
    "AdminInviteCreate",
    "AdminInviteInfo",
    "AdminInviteRead",
    # Messages
    "MessageCreate",
    "MessageRead",
    # Pagination
    "PaginatedResponse",
    # Projects
    "ProjectAssign",
    "ProjectCreate",
    "ProjectRead",
    "ProposalCreate",
    "ProposalRead",
    # Ratings
    "AdminRatingSummary",
    "RatingCreate",
    "RatingRead",
    # Reports
    "ReportSummary",
    # Subscriptions
    "PackageCreate",
    "PackageRead",
    "SubscriptionCreate",
    "SubscriptionRead",
    # Users
    "AdminSummary",
    "UserRead",
]
