"""FastAPI dependency injection definitions.

Re-exports all dependencies for convenience.
"""

from src.app.api.dependencies.auth import CurrentSession, get_current_session
from src.app.api.dependencies.db import DBSession, get_db_session
from src.app.api.dependencies.services import (
    AuditServiceDep,
    BillingServiceDep,
    InterestServiceDep,
    InviteServiceDep,
    MessageServiceDep,
    ProjectServiceDep,
    RatingServiceDep,
    ReportServiceDep,
    SubscriptionServiceDep,
    UserServiceDep,
    get_audit_service,
    get_billing_service,
    get_interest_service,
    get_invite_service,
    get_message_service,
    get_project_service,
    get_rating_service,
    get_report_service,
    get_subscription_service,
    get_user_service,
)

__all__ = [
    # Auth
    "CurrentSession",
    "get_current_session",
    # Database
    "DBSession",
    "get_db_session",
    # Services
    "AuditServiceDep",
    "BillingServiceDep",
    "InterestServiceDep",
    "InviteServiceDep",
    "MessageServiceDep",
    "ProjectServiceDep",
    "RatingServiceDep",
    "ReportServiceDep",
    "SubscriptionServiceDep",
    "UserServiceDep",
    "get_audit_service",
    "get_billing_service",
    "get_interest_service",
    "get_invite_service",
    "get_message_service",
    "get_project_service",
    "get_rating_service",
    "get_report_service",
    "get_subscription_service",
    "get_user_service",
]
