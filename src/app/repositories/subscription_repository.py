"""Repositories for subscription packages and subscriptions."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlmodel import select

from src.app.models import Subscription, SubscriptionPackage, SubscriptionStatus
from src.app.repositories.base import BaseRepository


class SubscriptionPackageRepository(BaseRepository[SubscriptionPackage]):
    model = SubscriptionPackage

    async def list_active(self) -> list[SubscriptionPackage]:
        result = await self.session.execute(
            select(SubscriptionPackage)
            .where(SubscriptionPackage.is_active == True)  # noqa: E712
            .order_by(SubscriptionPackage.monthly_price)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> SubscriptionPackage | None:
        result = await self.session.execute(
            select(SubscriptionPackage).where(SubscriptionPackage.name == name)
        )
        return result.scalar_one_or_none()


class SubscriptionRepository(BaseRepository[Subscription]):
    model = Subscription

    async def get_active_for_client(self, client_id: UUID) -> Subscription | None:
        result = await self.session.execute(
            select(Subscription).where(
                Subscription.client_id == client_id,
                Subscription.status == SubscriptionStatus.ACTIVE.value,
            )
        )
        return result.scalar_one_or_none()

    async def add_hours(self, subscription_id: UUID, hours: Decimal) -> bool:
        """Atomically add to ``hours_used`` for the current period."""
        return await self.update_where(
            subscription_id,
            Subscription.status == SubscriptionStatus.ACTIVE.value,
            hours_used=Subscription.hours_used + hours,
        )

    async def roll_period(
        self,
        subscription_id: UUID,
        expected_period_end: datetime,
        new_start: datetime,
        new_end: datetime,
    ) -> bool:
        """Start a new period and reset usage, unless another request already did."""
        return await self.update_where(
            subscription_id,
            Subscription.current_period_end == expected_period_end,
            current_period_start=new_start,
            current_period_end=new_end,
            hours_used=Decimal("0"),
        )
