"""Service factory dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends

from src.app.api.dependencies.db import DBSession
from src.app.api.dependencies.repositories import (
    InterestRepo,
    InviteRepo,
    InvoiceRepo,
    MessageRepo,
    PackageRepo,
    ProjectRepo,
    ProposalRepo,
    RatingRepo,
    SubscriptionRepo,
    TimeEntryRepo,
    UserRepo,
)
from src.app.core.db import get_session
from src.app.core.notifications import NotificationDispatcher, get_dispatcher
from src.app.core.payments import StripePaymentGateway, get_payment_gateway
from src.app.repositories import AuditLogRepository
from src.app.services.audit_service import AuditService
from src.app.services.authorization import Authorizer
from src.app.services.billing_service import BillingService
from src.app.services.interest_service import InterestService
from src.app.services.invite_service import InviteService
from src.app.services.message_service import MessageService
from src.app.services.notifier import ProjectNotifier
from src.app.services.project_service import ProjectService
from src.app.services.rating_service import RatingService
from src.app.services.report_service import ReportService
from src.app.services.subscription_service import SubscriptionService
from src.app.services.user_service import UserService

DispatcherDep = Annotated[NotificationDispatcher, Depends(get_dispatcher)]
GatewayDep = Annotated[StripePaymentGateway, Depends(get_payment_gateway)]


async def get_audit_service() -> AsyncGenerator[AuditService]:
    """Get audit service with its own isolated session.

    Uses a dedicated session that commits independently from business transactions.
    This ensures audit logs are preserved even if the main transaction rolls back.
    """
    async with get_session() as session:
        yield AuditService(AuditLogRepository(session), session)


AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]


def get_authorizer(audit_service: AuditServiceDep) -> Authorizer:
    return Authorizer(audit_service)


def get_notifier(user_repo: UserRepo, dispatcher: DispatcherDep) -> ProjectNotifier:
    return ProjectNotifier(user_repo, dispatcher)


AuthorizerDep = Annotated[Authorizer, Depends(get_authorizer)]
NotifierDep = Annotated[ProjectNotifier, Depends(get_notifier)]


def get_user_service(user_repo: UserRepo) -> UserService:
    return UserService(user_repo)


def get_subscription_service(
    package_repo: PackageRepo,
    subscription_repo: SubscriptionRepo,
    session: DBSession,
    audit_service: AuditServiceDep,
) -> SubscriptionService:
    return SubscriptionService(package_repo, subscription_repo, session, audit_service)


def get_billing_service(
    project_repo: ProjectRepo,
    proposal_repo: ProposalRepo,
    time_entry_repo: TimeEntryRepo,
    invoice_repo: InvoiceRepo,
    user_repo: UserRepo,
    session: DBSession,
    authorizer: AuthorizerDep,
    audit_service: AuditServiceDep,
    gateway: GatewayDep,
    subscriptions: Annotated[SubscriptionService, Depends(get_subscription_service)],
    notifier: NotifierDep,
) -> BillingService:
    return BillingService(
        project_repo,
        proposal_repo,
        time_entry_repo,
        invoice_repo,
        user_repo,
        session,
        authorizer,
        audit_service,
        gateway,
        subscriptions,
        notifier,
    )


def get_project_service(
    project_repo: ProjectRepo,
    proposal_repo: ProposalRepo,
    invoice_repo: InvoiceRepo,
    user_repo: UserRepo,
    session: DBSession,
    authorizer: AuthorizerDep,
    audit_service: AuditServiceDep,
    billing: Annotated[BillingService, Depends(get_billing_service)],
    notifier: NotifierDep,
) -> ProjectService:
    return ProjectService(
        project_repo,
        proposal_repo,
        invoice_repo,
        user_repo,
        session,
        authorizer,
        audit_service,
        billing,
        notifier,
    )


def get_message_service(
    message_repo: MessageRepo,
    project_repo: ProjectRepo,
    session: DBSession,
    authorizer: AuthorizerDep,
    notifier: NotifierDep,
) -> MessageService:
    return MessageService(message_repo, project_repo, session, authorizer, notifier)


def get_invite_service(
    invite_repo: InviteRepo,
    user_repo: UserRepo,
    session: DBSession,
    audit_service: AuditServiceDep,
    dispatcher: DispatcherDep,
) -> InviteService:
    return InviteService(invite_repo, user_repo, session, audit_service, dispatcher)


def get_interest_service(
    interest_repo: InterestRepo,
    project_repo: ProjectRepo,
    session: DBSession,
    projects: Annotated[ProjectService, Depends(get_project_service)],
    notifier: NotifierDep,
) -> InterestService:
    return InterestService(interest_repo, project_repo, session, projects, notifier)


def get_rating_service(
    rating_repo: RatingRepo,
    project_repo: ProjectRepo,
    user_repo: UserRepo,
    session: DBSession,
    authorizer: AuthorizerDep,
    audit_service: AuditServiceDep,
    notifier: NotifierDep,
) -> RatingService:
    return RatingService(
        rating_repo, project_repo, user_repo, session, authorizer, audit_service, notifier
    )


def get_report_service(
    project_repo: ProjectRepo, invoice_repo: InvoiceRepo, time_entry_repo: TimeEntryRepo
) -> ReportService:
    return ReportService(project_repo, invoice_repo, time_entry_repo)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
BillingServiceDep = Annotated[BillingService, Depends(get_billing_service)]
MessageServiceDep = Annotated[MessageService, Depends(get_message_service)]
InviteServiceDep = Annotated[InviteService, Depends(get_invite_service)]
SubscriptionServiceDep = Annotated[SubscriptionService, Depends(get_subscription_service)]
InterestServiceDep = Annotated[InterestService, Depends(get_interest_service)]
RatingServiceDep = Annotated[RatingService, Depends(get_rating_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
