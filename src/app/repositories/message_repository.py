"""Repository for Message entity."""

from uuid import UUID

from sqlmodel import select

from src.app.models import Message
from src.app.repositories.base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    model = Message

    async def list_for_project(
        self, project_id: UUID, cursor: str | None = None, limit: int = 50
    ) -> tuple[list[Message], str | None, bool]:
        query = select(Message).where(Message.project_id == project_id)
        return await self.paginate(query, cursor, limit, Message.created_at)
