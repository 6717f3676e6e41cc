"""Audit log endpoints - master admin only."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from src.app.api.dependencies import AuditServiceDep, CurrentSession
from src.app.models import UserRole
from src.app.schemas.audit import AuditLogRead
from src.app.schemas.pagination import PaginatedResponse
from src.app.services.authorization import require_role

router = APIRouter(prefix="/audit", tags=["audit"])

# Query parameter types
CursorQuery = Annotated[str | None, Query(description="Pagination cursor")]
LimitQuery = Annotated[int, Query(ge=1, le=100, description="Items per page")]
ActionQuery = Annotated[str | None, Query(description="Filter by action type")]
ActorIdQuery = Annotated[UUID | None, Query(description="Filter by acting user")]


@router.get(
    "/logs",
    response_model=PaginatedResponse[AuditLogRead],
    responses={403: {"description": "Master admin access required"}},
)
async def list_audit_logs(
    session: CurrentSession,
    audit_service: AuditServiceDep,
    cursor: CursorQuery = None,
    limit: LimitQuery = 50,
    action: ActionQuery = None,
    actor_id: ActorIdQuery = None,
) -> PaginatedResponse[AuditLogRead]:
    """Newest first. Overrides are recorded as ``project.override``."""
    require_role(session, UserRole.MASTER_ADMIN)
    logs, next_cursor, has_more = await audit_service.list_logs(
        cursor=cursor, limit=limit, action=action, actor_id=actor_id
    )
    return PaginatedResponse(
        items=[AuditLogRead.model_validate(log) for log in logs],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get(
    "/logs/entity/{entity_type}/{entity_id}",
    response_model=PaginatedResponse[AuditLogRead],
    responses={403: {"description": "Master admin access required"}},
)
async def get_entity_history(
    entity_type: str,
    entity_id: UUID,
    session: CurrentSession,
    audit_service: AuditServiceDep,
    cursor: CursorQuery = None,
    limit: LimitQuery = 50,
) -> PaginatedResponse[AuditLogRead]:
    """Everything recorded against one entity, e.g. a project's overrides."""
    require_role(session, UserRole.MASTER_ADMIN)
    logs, next_cursor, has_more = await audit_service.list_entity_history(
        entity_type=entity_type, entity_id=entity_id, cursor=cursor, limit=limit
    )
    return PaginatedResponse(
        items=[AuditLogRead.model_validate(log) for log in logs],
        next_cursor=next_cursor,
        has_more=has_more,
    )
