"""Repository for AdminInvite entity."""

from uuid import UUID

from sqlmodel import select, update

from src.app.models import AdminInvite, InviteStatus
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class AdminInviteRepository(BaseRepository[AdminInvite]):
    model = AdminInvite

    async def get_valid_by_hash(self, token_hash: str) -> AdminInvite | None:
        """Get a valid (pending, non-expired) invite by its hash."""
        result = await self.session.execute(
            select(AdminInvite).where(
                AdminInvite.token_hash == token_hash,
                AdminInvite.status == InviteStatus.PENDING.value,
                AdminInvite.expires_at > utc_now(),
            )
        )
        return result.scalar_one_or_none()

    async def list_pending(
        self, cursor: str | None = None, limit: int = 50
    ) -> tuple[list[AdminInvite], str | None, bool]:
        query = select(AdminInvite).where(AdminInvite.status == InviteStatus.PENDING.value)
        return await self.paginate(query, cursor, limit, AdminInvite.created_at)

    async def mark_accepted(self, invite_id: UUID, user_id: UUID) -> bool:
        """Single-use: only a still-pending invite can be accepted."""
        return await self.update_where(
            invite_id,
            AdminInvite.status == InviteStatus.PENDING.value,
            status=InviteStatus.ACCEPTED.value,
            accepted_at=utc_now(),
            accepted_by_id=user_id,
        )

    async def mark_cancelled(self, invite_id: UUID) -> bool:
        return await self.update_where(
            invite_id,
            AdminInvite.status == InviteStatus.PENDING.value,
            status=InviteStatus.CANCELLED.value,
        )

    async def invalidate_existing(self, email: str) -> None:
        """Cancel earlier pending invites for the same e-mail."""
        await self.session.execute(
            update(AdminInvite)
            .where(AdminInvite.email == email)  # type: ignore[arg-type]
            .where(AdminInvite.status == InviteStatus.PENDING.value)  # type: ignore[arg-type]
            .values(status=InviteStatus.CANCELLED.value)
        )
