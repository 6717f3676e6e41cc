"""Repository for User entity."""

from uuid import UUID

from sqlmodel import select

from src.app.models import User, UserRole
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_external_id(self, external_id: str) -> User | None:
        """Get user by identity-provider subject."""
        result = await self.session.execute(select(User).where(User.external_id == external_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_stripe_customer(self, customer_id: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.stripe_customer_id == customer_id)
        )
        return result.scalar_one_or_none()

    async def list_by_role(self, *roles: UserRole) -> list[User]:
        """Active users holding any of ``roles``, by e-mail."""
        result = await self.session.execute(
            select(User)
            .where(
                User.role.in_([r.value for r in roles]),  # type: ignore[attr-defined]
                User.is_active == True,  # noqa: E712
            )
            .order_by(User.email)
        )
        return list(result.scalars().all())

    async def list_emails(self, *roles: UserRole) -> list[str]:
        return [u.email for u in await self.list_by_role(*roles)]

    async def change_role(self, user_id: UUID, from_role: UserRole, to_role: UserRole) -> bool:
        """Move a user from ``from_role`` to ``to_role``. False if the role had changed."""
        return await self.update_where(
            user_id,
            User.role == from_role.value,
            role=to_role.value,
            updated_at=utc_now(),
        )
