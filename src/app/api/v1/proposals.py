"""Proposal decision endpoints."""

from uuid import UUID

from fastapi import APIRouter

from src.app.api.dependencies import CurrentSession, ProjectServiceDep
from src.app.schemas.proposal import ProposalRead

router = APIRouter(prefix="/proposals", tags=["proposals"])


@router.get("/{proposal_id}", response_model=ProposalRead, summary="Get proposal")
async def get_proposal(
    proposal_id: UUID, session: CurrentSession, service: ProjectServiceDep
) -> ProposalRead:
    """Software admins receive the proposal without rates, estimate or fee."""
    proposal, decision = await service.get_proposal(session, proposal_id)
    return ProposalRead.for_viewer(proposal, decision.can_view_pricing)


@router.post(
    "/{proposal_id}/accept",
    response_model=ProposalRead,
    summary="Accept proposal",
    responses={
        402: {"description": "A saved payment method is required first"},
        409: {"description": "Proposal is no longer pending"},
    },
)
async def accept_proposal(
    proposal_id: UUID, session: CurrentSession, service: ProjectServiceDep
) -> ProposalRead:
    proposal = await service.accept_proposal(session, proposal_id)
    return ProposalRead.for_viewer(proposal, session.can_view_pricing)


@router.post(
    "/{proposal_id}/reject",
    response_model=ProposalRead,
    summary="Reject proposal",
    responses={409: {"description": "Proposal is no longer pending"}},
)
async def reject_proposal(
    proposal_id: UUID, session: CurrentSession, service: ProjectServiceDep
) -> ProposalRead:
    proposal = await service.reject_proposal(session, proposal_id)
    return ProposalRead.for_viewer(proposal, session.can_view_pricing)
