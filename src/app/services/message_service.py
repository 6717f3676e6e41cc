"""Project messages between the client, the assigned admin and master admins."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import InvalidTransition, NotFound
from src.app.core.logging import get_logger
from src.app.models import Message, ProjectStatus
from src.app.repositories import MessageRepository, ProjectRepository
from src.app.schemas.message import MessageCreate
from src.app.services.authorization import Authorizer, ProjectAction, Session, require_session
from src.app.services.notifier import ProjectNotifier

logger = get_logger(__name__)


class MessageService:
    def __init__(
        self,
        message_repo: MessageRepository,
        project_repo: ProjectRepository,
        session: AsyncSession,
        authorizer: Authorizer,
        notifier: ProjectNotifier,
    ):
        self.message_repo = message_repo
        self.project_repo = project_repo
        self.session = session
        self.authorizer = authorizer
        self.notifier = notifier

    async def post(
        self, session: Session | None, project_id: UUID, data: MessageCreate
    ) -> Message:
        session = require_session(session)
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFound("We couldn't find that project.")
        await self.authorizer.check(session, project, ProjectAction.MESSAGE)
        if project.status_enum == ProjectStatus.CANCELLED:
            raise InvalidTransition("Messages can't be sent on a cancelled project.")

        message = Message(project_id=project.id, sender_id=session.user_id, body=data.body)
        try:
            self.message_repo.add(message)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(message)
        logger.info("Message posted", project_id=str(project.id), message_id=str(message.id))
        await self.notifier.project_event(
            "message.posted",
            project,
            [project.client_id, project.assigned_admin_id],
            exclude=session.user_id,
            sender_name=session.email or "A participant",
        )
        return message

    async def list_messages(
        self,
        session: Session | None,
        project_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[Message], str | None, bool]:
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFound("We couldn't find that project.")
        await self.authorizer.check(session, project, ProjectAction.VIEW)
        return await self.message_repo.list_for_project(project_id, cursor, limit)
