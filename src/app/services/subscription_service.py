"""Subscription packages and per-period hour tracking."""

import calendar
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import InvalidTransition, NotFound, ValidationError
from src.app.core.logging import get_logger
from src.app.models import AuditAction, Subscription, SubscriptionPackage, UserRole
from src.app.models.base import utc_now
from src.app.repositories import SubscriptionPackageRepository, SubscriptionRepository
from src.app.schemas.subscription import PackageCreate
from src.app.services.audit_service import AuditService
from src.app.services.authorization import Session, require_role

logger = get_logger(__name__)


def add_month(dt: datetime) -> datetime:
    """Same day next month, clamped to the month's last day (Jan 31 -> Feb 28/29)."""
    year, month = (dt.year + 1, 1) if dt.month == 12 else (dt.year, dt.month + 1)
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def current_period(start: datetime, end: datetime, now: datetime) -> tuple[datetime, datetime]:
    """Advance a monthly period until it contains ``now``."""
    while end <= now:
        start, end = end, add_month(end)
    return start, end


class SubscriptionService:
    def __init__(
        self,
        package_repo: SubscriptionPackageRepository,
        subscription_repo: SubscriptionRepository,
        session: AsyncSession,
        audit_service: AuditService,
    ):
        self.package_repo = package_repo
        self.subscription_repo = subscription_repo
        self.session = session
        self.audit_service = audit_service

    async def list_packages(self, session: Session | None) -> list[SubscriptionPackage]:
        require_role(session, *UserRole)
        return await self.package_repo.list_active()

    async def create_package(
        self, session: Session | None, data: PackageCreate
    ) -> SubscriptionPackage:
        session = require_role(session, UserRole.MASTER_ADMIN)
        if data.hours_allotment <= 0:
            raise ValidationError("A package needs a positive hours allotment.")

        package = SubscriptionPackage(
            name=data.name.strip(),
            description=data.description,
            monthly_price=data.monthly_price,
            hours_allotment=data.hours_allotment,
        )
        try:
            self.package_repo.add(package)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ValidationError("A package with this name already exists.") from e
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(package)
        await self.audit_service.log_success(
            AuditAction.PACKAGE_CREATE,
            entity_type="subscription_package",
            entity_id=package.id,
            actor_id=session.user_id,
            changes={"name": package.name, "monthly_price": package.monthly_price},
        )
        return package

    async def subscribe(self, session: Session | None, package_id: UUID) -> Subscription:
        session = require_role(session, UserRole.CLIENT)
        package = await self.package_repo.get_by_id(package_id)
        if package is None or not package.is_active:
            raise NotFound("We couldn't find that package.")
        if await self.subscription_repo.get_active_for_client(session.user_id) is not None:
            raise InvalidTransition("You already have an active subscription.")

        now = utc_now()
        subscription = Subscription(
            client_id=session.user_id,
            package_id=package.id,
            current_period_start=now,
            current_period_end=add_month(now),
        )
        try:
            self.subscription_repo.add(subscription)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(subscription)
        logger.info(
            "Subscription started",
            subscription_id=str(subscription.id),
            package_id=str(package.id),
        )
        return subscription

    async def get_current(self, session: Session | None) -> Subscription | None:
        """The caller's active subscription, rolled into the current period."""
        session = require_role(session, UserRole.CLIENT)
        subscription = await self.subscription_repo.get_active_for_client(session.user_id)
        if subscription is None:
            return None
        if await self._roll_if_expired(subscription):
            await self.session.commit()
            await self.session.refresh(subscription)
        return subscription

    async def record_usage(self, client_id: UUID, hours: Decimal) -> None:
        """Add logged hours to the client's subscription, if any (no commit)."""
        subscription = await self.subscription_repo.get_active_for_client(client_id)
        if subscription is None:
            return
        await self._roll_if_expired(subscription)
        await self.subscription_repo.add_hours(subscription.id, hours)

    async def _roll_if_expired(self, subscription: Subscription) -> bool:
        now = utc_now()
        if subscription.current_period_end > now:
            return False
        start, end = current_period(
            subscription.current_period_start, subscription.current_period_end, now
        )
        rolled = await self.subscription_repo.roll_period(
            subscription.id, subscription.current_period_end, start, end
        )
        if rolled:
            logger.info("Subscription period rolled over", subscription_id=str(subscription.id))
        return rolled
