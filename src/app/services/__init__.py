from src.app.services.audit_service import AuditService
from src.app.services.authorization import Authorizer, ProjectAction, Session
from src.app.services.billing_service import BillingService
from src.app.services.interest_service import InterestService
from src.app.services.invite_service import InviteService
from src.app.services.message_service import MessageService
from src.app.services.project_service import ProjectService
from src.app.services.rating_service import RatingService
from src.app.services.report_service import ReportService
from src.app.services.subscription_service import SubscriptionService
from src.app.services.user_service import SessionResolver, UserService

__all__ = [
    "AuditService",
    "Authorizer",
    "BillingService",
    "InterestService",
    "InviteService",
    "MessageService",
    "ProjectAction",
    "ProjectService",
    "RatingService",
    "ReportService",
    "Session",
    "SessionResolver",
    "SubscriptionService",
    "UserService",
]
