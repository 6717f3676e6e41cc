"""Repository for InterestRequest entity."""

from uuid import UUID

from sqlalchemy import update
from sqlmodel import select

from src.app.models import InterestRequest, InterestStatus
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class InterestRequestRepository(BaseRepository[InterestRequest]):
    model = InterestRequest

    async def get_pending(self, project_id: UUID, admin_id: UUID) -> InterestRequest | None:
        result = await self.session.execute(
            select(InterestRequest).where(
                InterestRequest.project_id == project_id,
                InterestRequest.admin_id == admin_id,
                InterestRequest.status == InterestStatus.PENDING.value,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_status(
        self,
        status: InterestStatus | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[InterestRequest], str | None, bool]:
        query = select(InterestRequest)
        if status is not None:
            query = query.where(InterestRequest.status == status.value)
        return await self.paginate(query, cursor, limit, InterestRequest.created_at)

    async def list_for_admin(
        self,
        admin_id: UUID,
        status: InterestStatus | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[InterestRequest], str | None, bool]:
        query = select(InterestRequest).where(InterestRequest.admin_id == admin_id)
        if status is not None:
            query = query.where(InterestRequest.status == status.value)
        return await self.paginate(query, cursor, limit, InterestRequest.created_at)

    async def decide(self, request_id: UUID, decision: InterestStatus, decided_by: UUID) -> bool:
        """pending -> approved|declined. False if the request was already decided."""
        return await self.update_where(
            request_id,
            InterestRequest.status == InterestStatus.PENDING.value,
            status=decision.value,
            decided_by_id=decided_by,
            decided_at=utc_now(),
        )

    async def decline_others(
        self, project_id: UUID, keep_id: UUID, decided_by: UUID
    ) -> list[UUID]:
        """Decline every other pending request for the project.

        Returns:
            Admin ids whose requests were declined.
        """
        result = await self.session.execute(
            update(InterestRequest)
            .where(
                InterestRequest.project_id == project_id,  # type: ignore[arg-type]
                InterestRequest.id != keep_id,  # type: ignore[arg-type]
                InterestRequest.status == InterestStatus.PENDING.value,  # type: ignore[arg-type]
            )
            .values(
                status=InterestStatus.DECLINED.value,
                decided_by_id=decided_by,
                decided_at=utc_now(),
            )
            .returning(InterestRequest.admin_id)
            .execution_options(synchronize_session=False)
        )
        return list(result.scalars().all())
