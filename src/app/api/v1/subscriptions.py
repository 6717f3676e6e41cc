"""Subscription package endpoints."""

from fastapi import APIRouter, status

from src.app.api.dependencies import CurrentSession, SubscriptionServiceDep
from src.app.schemas.subscription import (
    PackageCreate,
    PackageRead,
    SubscriptionCreate,
    SubscriptionRead,
)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.get("/packages", response_model=list[PackageRead])
async def list_packages(
    session: CurrentSession, service: SubscriptionServiceDep
) -> list[PackageRead]:
    packages = await service.list_packages(session)
    return [PackageRead.model_validate(p) for p in packages]


@router.post(
    "/packages",
    response_model=PackageRead,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"description": "Master admin only"}},
)
async def create_package(
    data: PackageCreate, session: CurrentSession, service: SubscriptionServiceDep
) -> PackageRead:
    package = await service.create_package(session, data)
    return PackageRead.model_validate(package)


@router.post(
    "",
    response_model=SubscriptionRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Already subscribed"}},
)
async def subscribe(
    data: SubscriptionCreate, session: CurrentSession, service: SubscriptionServiceDep
) -> SubscriptionRead:
    subscription = await service.subscribe(session, data.package_id)
    return SubscriptionRead.model_validate(subscription)


@router.get("/me", response_model=SubscriptionRead | None)
async def get_my_subscription(
    session: CurrentSession, service: SubscriptionServiceDep
) -> SubscriptionRead | None:
    """Current period usage; null when not subscribed."""
    subscription = await service.get_current(session)
    return SubscriptionRead.model_validate(subscription) if subscription else None
