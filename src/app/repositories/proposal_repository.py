"""Repository for Proposal entity."""

from uuid import UUID

from sqlmodel import select

from src.app.models import Proposal, ProposalStatus
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class ProposalRepository(BaseRepository[Proposal]):
    model = Proposal

    async def get_pending_for_project(self, project_id: UUID) -> Proposal | None:
        result = await self.session.execute(
            select(Proposal).where(
                Proposal.project_id == project_id,
                Proposal.status == ProposalStatus.PENDING.value,
            )
        )
        return result.scalar_one_or_none()

    async def get_accepted_for_project(self, project_id: UUID) -> Proposal | None:
        """The most recently accepted proposal; it defines the project's pricing."""
        result = await self.session.execute(
            select(Proposal)
            .where(
                Proposal.project_id == project_id,
                Proposal.status == ProposalStatus.ACCEPTED.value,
            )
            .order_by(Proposal.decided_at.desc())  # type: ignore[union-attr]
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_for_project(self, project_id: UUID) -> list[Proposal]:
        """All proposals for a project, superseded ones included, newest first."""
        result = await self.session.execute(
            select(Proposal)
            .where(Proposal.project_id == project_id)
            .order_by(Proposal.created_at.desc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def decide(self, proposal_id: UUID, status: ProposalStatus) -> bool:
        """Accept or reject a pending proposal. False if it was no longer pending."""
        return await self.update_where(
            proposal_id,
            Proposal.status == ProposalStatus.PENDING.value,
            status=status.value,
            decided_at=utc_now(),
        )
