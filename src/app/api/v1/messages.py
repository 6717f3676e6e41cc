"""Project message endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.app.api.dependencies import CurrentSession, MessageServiceDep
from src.app.schemas.message import MessageCreate, MessageRead
from src.app.schemas.pagination import PaginatedResponse

router = APIRouter(prefix="/projects/{project_id}/messages", tags=["messages"])


@router.post(
    "",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send message",
)
async def post_message(
    project_id: UUID, data: MessageCreate, session: CurrentSession, service: MessageServiceDep
) -> MessageRead:
    message = await service.post(session, project_id, data)
    return MessageRead.model_validate(message)


@router.get("", response_model=PaginatedResponse[MessageRead], summary="List messages")
async def list_messages(
    project_id: UUID,
    session: CurrentSession,
    service: MessageServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 50,
) -> PaginatedResponse[MessageRead]:
    messages, next_cursor, has_more = await service.list_messages(
        session, project_id, cursor=cursor, limit=limit
    )
    return PaginatedResponse(
        items=[MessageRead.model_validate(m) for m in messages],
        next_cursor=next_cursor,
        has_more=has_more,
    )
