"""Interest request endpoints - admins asking to take on unassigned projects."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.app.api.dependencies import CurrentSession, InterestServiceDep
from src.app.models import InterestStatus
from src.app.schemas.interest import InterestRequestCreate, InterestRequestRead
from src.app.schemas.pagination import PaginatedResponse

router = APIRouter(prefix="/interest-requests", tags=["interest-requests"])

_DECISION_RESPONSES: dict[int | str, dict[str, str]] = {
    403: {"description": "Master admin only"},
    404: {"description": "Request not found"},
    409: {"description": "Already decided, or the project is no longer unassigned"},
}


@router.post(
    "",
    response_model=InterestRequestRead,
    status_code=status.HTTP_201_CREATED,
    summary="Ask to take on a project",
    description="Software admins only. The project must be submitted and unassigned.",
    responses={
        403: {"description": "Software admin only"},
        404: {"description": "Project not found"},
        409: {"description": "Project already taken, or a request is already pending"},
    },
)
async def create_interest_request(
    data: InterestRequestCreate, session: CurrentSession, service: InterestServiceDep
) -> InterestRequestRead:
    interest = await service.request(session, data.project_id, data.note)
    return InterestRequestRead.model_validate(interest)


@router.get(
    "",
    response_model=PaginatedResponse[InterestRequestRead],
    summary="List interest requests",
    description="Master admins see every request; software admins see their own.",
)
async def list_interest_requests(
    session: CurrentSession,
    service: InterestServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 50,
    status_filter: Annotated[InterestStatus | None, Query(alias="status")] = None,
) -> PaginatedResponse[InterestRequestRead]:
    requests, next_cursor, has_more = await service.list_requests(
        session, status_filter, cursor, limit
    )
    return PaginatedResponse(
        items=[InterestRequestRead.model_validate(r) for r in requests],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.post(
    "/{request_id}/approve",
    response_model=InterestRequestRead,
    summary="Approve and assign",
    description="Assigns the project to the requesting admin and declines competing requests.",
    responses=_DECISION_RESPONSES,
)
async def approve_interest_request(
    request_id: UUID, session: CurrentSession, service: InterestServiceDep
) -> InterestRequestRead:
    interest = await service.approve(session, request_id)
    return InterestRequestRead.model_validate(interest)


@router.post(
    "/{request_id}/decline",
    response_model=InterestRequestRead,
    summary="Decline",
    responses=_DECISION_RESPONSES,
)
async def decline_interest_request(
    request_id: UUID, session: CurrentSession, service: InterestServiceDep
) -> InterestRequestRead:
    interest = await service.decline(session, request_id)
    return InterestRequestRead.model_validate(interest)
