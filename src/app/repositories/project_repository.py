"""Repository for Project entity."""

from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select

from src.app.models import Project, ProjectStatus
from src.app.models.base import utc_now
from src.app.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    model = Project

    async def transition(
        self,
        project_id: UUID,
        from_statuses: Iterable[ProjectStatus],
        to_status: ProjectStatus,
        **values: Any,
    ) -> bool:
        """Move a project to ``to_status`` only if its stored status is one of ``from_statuses``.

        Returns:
            True if this call performed the transition. False means the stored
            status did not match (or the project does not exist).
        """
        return await self.update_where(
            project_id,
            Project.status.in_([s.value for s in from_statuses]),  # type: ignore[attr-defined]
            status=to_status.value,
            updated_at=utc_now(),
            **values,
        )

    async def list_for_client(
        self,
        client_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
        status: ProjectStatus | None = None,
    ) -> tuple[list[Project], str | None, bool]:
        query = select(Project).where(Project.client_id == client_id)
        return await self._list(query, cursor, limit, status)

    async def list_for_admin(
        self,
        admin_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
        status: ProjectStatus | None = None,
    ) -> tuple[list[Project], str | None, bool]:
        query = select(Project).where(Project.assigned_admin_id == admin_id)
        return await self._list(query, cursor, limit, status)

    async def list_all(
        self,
        cursor: str | None = None,
        limit: int = 50,
        status: ProjectStatus | None = None,
    ) -> tuple[list[Project], str | None, bool]:
        return await self._list(select(Project), cursor, limit, status)

    async def _list(
        self, query: Any, cursor: str | None, limit: int, status: ProjectStatus | None
    ) -> tuple[list[Project], str | None, bool]:
        if status is not None:
            query = query.where(Project.status == status.value)
        return await self.paginate(query, cursor, limit, Project.created_at)

    async def list_open(
        self, cursor: str | None = None, limit: int = 50
    ) -> tuple[list[Project], str | None, bool]:
        """Submitted projects nobody has been assigned to yet."""
        query = select(Project).where(
            Project.status == ProjectStatus.SUBMITTED.value,
            Project.assigned_admin_id.is_(None),  # type: ignore[union-attr]
        )
        return await self.paginate(query, cursor, limit, Project.created_at)

    async def count_by_status(
        self, admin_id: UUID | None = None, since: datetime | None = None
    ) -> dict[str, int]:
        query = select(Project.status, func.count()).group_by(Project.status)
        if admin_id is not None:
            query = query.where(Project.assigned_admin_id == admin_id)
        if since is not None:
            query = query.where(Project.created_at >= since)
        result = await self.session.execute(query)
        return {status: int(count) for status, count in result.all()}
