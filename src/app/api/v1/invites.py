"""Admin invite endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from src.app.api.dependencies import CurrentSession, InviteServiceDep
from src.app.schemas.invite import (
    AdminInviteAccept,
    AdminInviteCreate,
    AdminInviteInfo,
    AdminInviteRead,
)
from src.app.schemas.pagination import PaginatedResponse
from src.app.schemas.user import UserRead

router = APIRouter(prefix="/invites", tags=["invites"])


@router.post(
    "/admin",
    response_model=AdminInviteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Invite an admin",
    description="Master admin only. E-mails a single-use signup link.",
)
async def create_admin_invite(
    data: AdminInviteCreate, session: CurrentSession, service: InviteServiceDep
) -> AdminInviteRead:
    invite, _token = await service.create_invite(session, data.email)
    return AdminInviteRead.model_validate(invite)


@router.get(
    "/admin",
    response_model=PaginatedResponse[AdminInviteRead],
    summary="List pending admin invites",
)
async def list_admin_invites(
    session: CurrentSession,
    service: InviteServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 50,
) -> PaginatedResponse[AdminInviteRead]:
    invites, next_cursor, has_more = await service.list_pending(session, cursor, limit)
    return PaginatedResponse(
        items=[AdminInviteRead.model_validate(i) for i in invites],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get(
    "/admin/info",
    response_model=AdminInviteInfo,
    summary="Look up an invite",
    responses={404: {"description": "Invalid or expired invite"}},
)
async def get_admin_invite_info(
    token: Annotated[str, Query(min_length=1)], service: InviteServiceDep
) -> AdminInviteInfo:
    return AdminInviteInfo(**await service.get_invite_info(token))


@router.post(
    "/admin/accept",
    response_model=UserRead,
    summary="Accept an admin invite",
    responses={
        403: {"description": "Invite was sent to another e-mail"},
        404: {"description": "Invalid or expired invite"},
    },
)
async def accept_admin_invite(
    data: AdminInviteAccept, session: CurrentSession, service: InviteServiceDep
) -> UserRead:
    user = await service.accept_invite(session, data.token)
    return UserRead.model_validate(user)
