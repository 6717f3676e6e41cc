"""Audit logging service - records master-admin overrides and privileged actions."""

import contextlib
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.audit_context import get_audit_context
from src.app.core.logging import get_logger
from src.app.models import AuditAction, AuditLog, AuditStatus
from src.app.repositories import AuditLogRepository

logger = get_logger(__name__)


class AuditService:
    """Service for recording audit logs.

    Fire-and-forget design: logging failures should not block business operations.
    Runs on its own session so its commits never touch a request's transaction.
    """

    def __init__(self, audit_repo: AuditLogRepository, session: AsyncSession):
        self.audit_repo = audit_repo
        self.session = session

    async def log_action(
        self,
        action: AuditAction | str,
        entity_type: str,
        entity_id: UUID | None = None,
        actor_id: UUID | None = None,
        changes: dict[str, Any] | None = None,
        status: AuditStatus = AuditStatus.SUCCESS,
        error_message: str | None = None,
    ) -> AuditLog | None:
        """Record an audit log entry.

        Extracts request metadata from context (IP, user agent, request_id).
        Failures are logged but do not raise exceptions.

        Returns:
            The created AuditLog, or None if logging failed
        """
        action_value = action.value if isinstance(action, AuditAction) else action
        try:
            ctx = get_audit_context()
            audit_log = AuditLog(
                actor_id=actor_id,
                action=action_value,
                entity_type=entity_type,
                entity_id=entity_id,
                changes=changes,
                ip_address=ctx.ip_address if ctx else None,
                user_agent=ctx.user_agent if ctx else None,
                request_id=ctx.request_id if ctx else None,
                status=status.value,
                error_message=error_message[:1000] if error_message else None,
            )

            self.audit_repo.add(audit_log)
            await self.session.commit()

            logger.debug(
                "Audit log recorded",
                action=action_value,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id else None,
            )
            return audit_log

        except Exception as e:
            logger.warning(
                "Failed to record audit log",
                action=action_value,
                entity_type=entity_type,
                error=str(e),
            )
            with contextlib.suppress(Exception):
                await self.session.rollback()
            return None

    async def log_success(
        self,
        action: AuditAction | str,
        entity_type: str,
        entity_id: UUID | None = None,
        actor_id: UUID | None = None,
        changes: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        return await self.log_action(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            changes=changes,
        )

    async def log_failure(
        self,
        action: AuditAction | str,
        entity_type: str,
        error_message: str,
        entity_id: UUID | None = None,
        actor_id: UUID | None = None,
    ) -> AuditLog | None:
        return await self.log_action(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            status=AuditStatus.FAILURE,
            error_message=error_message,
        )

    async def list_logs(
        self,
        cursor: str | None = None,
        limit: int = 50,
        action: str | None = None,
        actor_id: UUID | None = None,
    ) -> tuple[list[AuditLog], str | None, bool]:
        return await self.audit_repo.list_logs(
            cursor=cursor, limit=limit, action=action, actor_id=actor_id
        )

    async def list_entity_history(
        self,
        entity_type: str,
        entity_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditLog], str | None, bool]:
        return await self.audit_repo.list_by_entity(
            entity_type=entity_type, entity_id=entity_id, cursor=cursor, limit=limit
        )
