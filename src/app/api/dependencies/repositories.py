"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.app.api.dependencies.db import DBSession
from src.app.repositories import (
    AdminInviteRepository,
    InterestRequestRepository,
    InvoiceRepository,
    MessageRepository,
    ProjectRepository,
    ProposalRepository,
    RatingRepository,
    SubscriptionPackageRepository,
    SubscriptionRepository,
    TimeEntryRepository,
    UserRepository,
)


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_project_repository(session: DBSession) -> ProjectRepository:
    return ProjectRepository(session)


def get_proposal_repository(session: DBSession) -> ProposalRepository:
    return ProposalRepository(session)


def get_time_entry_repository(session: DBSession) -> TimeEntryRepository:
    return TimeEntryRepository(session)


def get_invoice_repository(session: DBSession) -> InvoiceRepository:
    return InvoiceRepository(session)


def get_message_repository(session: DBSession) -> MessageRepository:
    return MessageRepository(session)


def get_invite_repository(session: DBSession) -> AdminInviteRepository:
    return AdminInviteRepository(session)


def get_interest_repository(session: DBSession) -> InterestRequestRepository:
    return InterestRequestRepository(session)


def get_rating_repository(session: DBSession) -> RatingRepository:
    return RatingRepository(session)


def get_package_repository(session: DBSession) -> SubscriptionPackageRepository:
    return SubscriptionPackageRepository(session)


def get_subscription_repository(session: DBSession) -> SubscriptionRepository:
    return SubscriptionRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
ProjectRepo = Annotated[ProjectRepository, Depends(get_project_repository)]
ProposalRepo = Annotated[ProposalRepository, Depends(get_proposal_repository)]
TimeEntryRepo = Annotated[TimeEntryRepository, Depends(get_time_entry_repository)]
InvoiceRepo = Annotated[InvoiceRepository, Depends(get_invoice_repository)]
MessageRepo = Annotated[MessageRepository, Depends(get_message_repository)]
InviteRepo = Annotated[AdminInviteRepository, Depends(get_invite_repository)]
InterestRepo = Annotated[InterestRequestRepository, Depends(get_interest_repository)]
RatingRepo = Annotated[RatingRepository, Depends(get_rating_repository)]
PackageRepo = Annotated[SubscriptionPackageRepository, Depends(get_package_repository)]
SubscriptionRepo = Annotated[SubscriptionRepository, Depends(get_subscription_repository)]
