"""Repository for AuditLog entity."""

from uuid import UUID

from sqlmodel import select

from src.app.models import AuditLog
from src.app.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    model = AuditLog

    async def list_logs(
        self,
        cursor: str | None = None,
        limit: int = 50,
        action: str | None = None,
        actor_id: UUID | None = None,
    ) -> tuple[list[AuditLog], str | None, bool]:
        """List audit logs with cursor pagination.

        Args:
            cursor: Pagination cursor
            limit: Maximum items to return
            action: Optional action type filter
            actor_id: Optional actor filter

        Returns:
            Tuple of (logs, next_cursor, has_more)
        """
        query = select(AuditLog)
        if action:
            query = query.where(AuditLog.action == action)
        if actor_id:
            query = query.where(AuditLog.actor_id == actor_id)
        return await self.paginate(query, cursor, limit, AuditLog.created_at)

    async def list_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditLog], str | None, bool]:
        query = select(AuditLog).where(
            AuditLog.entity_type == entity_type,
            AuditLog.entity_id == entity_id,
        )
        return await self.paginate(query, cursor, limit, AuditLog.created_at)
