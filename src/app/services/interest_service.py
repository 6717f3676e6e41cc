"""Interest requests: software admins ask for unassigned projects, master admins decide."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import ConflictingInterest, InvalidTransition, NotFound
from src.app.core.logging import get_logger
from src.app.models import InterestRequest, InterestStatus, ProjectStatus, UserRole
from src.app.repositories import InterestRequestRepository, ProjectRepository
from src.app.services.authorization import Session, require_role
from src.app.services.notifier import MASTER_ADMINS, ProjectNotifier
from src.app.services.project_service import ProjectService

logger = get_logger(__name__)

ALREADY_DECIDED = "This request has already been decided."


class InterestService:
    def __init__(
        self,
        interest_repo: InterestRequestRepository,
        project_repo: ProjectRepository,
        session: AsyncSession,
        projects: ProjectService,
        notifier: ProjectNotifier,
    ):
        self.interest_repo = interest_repo
        self.project_repo = project_repo
        self.session = session
        self.projects = projects
        self.notifier = notifier

    async def request(
        self, session: Session | None, project_id: UUID, note: str | None = None
    ) -> InterestRequest:
        """Ask to be assigned to a submitted project nobody has taken yet."""
        session = require_role(session, UserRole.SOFTWARE_ADMIN)
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFound("We couldn't find that project.")
        if project.status_enum != ProjectStatus.SUBMITTED or project.assigned_admin_id is not None:
            raise InvalidTransition("Only projects waiting for an admin can be requested.")
        if await self.interest_repo.get_pending(project.id, session.user_id) is not None:
            raise ConflictingInterest()

        interest = InterestRequest(project_id=project.id, admin_id=session.user_id, note=note)
        try:
            self.interest_repo.add(interest)
            await self.session.commit()
        except IntegrityError as e:
            # Partial unique index: a concurrent request from the same admin won
            await self.session.rollback()
            raise ConflictingInterest() from e
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(interest)
        logger.info(
            "Interest requested", interest_id=str(interest.id), project_id=str(project.id)
        )
        await self.notifier.project_event(
            "interest.requested", project, [MASTER_ADMINS], interest_id=str(interest.id)
        )
        return interest

    async def approve(self, session: Session | None, request_id: UUID) -> InterestRequest:
        """Assign the project to the requesting admin and decline competing requests.

        Assignment goes through the regular lifecycle transition, so a project that
        is no longer submitted is refused and the request stays pending.
        """
        session = require_role(session, UserRole.MASTER_ADMIN)
        interest = await self._get(request_id)
        if interest.status_enum != InterestStatus.PENDING:
            raise InvalidTransition(ALREADY_DECIDED)

        project = await self.projects.assign(session, interest.project_id, interest.admin_id)

        try:
            if not await self.interest_repo.decide(
                interest.id, InterestStatus.APPROVED, session.user_id
            ):
                raise InvalidTransition(ALREADY_DECIDED)
            declined = await self.interest_repo.decline_others(
                interest.project_id, interest.id, session.user_id
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(interest)
        logger.info(
            "Interest approved",
            interest_id=str(interest.id),
            project_id=str(interest.project_id),
            declined=len(declined),
        )
        if declined:
            await self.notifier.project_event("interest.declined", project, declined)
        return interest

    async def decline(self, session: Session | None, request_id: UUID) -> InterestRequest:
        session = require_role(session, UserRole.MASTER_ADMIN)
        interest = await self._get(request_id)

        try:
            if not await self.interest_repo.decide(
                interest.id, InterestStatus.DECLINED, session.user_id
            ):
                raise InvalidTransition(ALREADY_DECIDED)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(interest)
        logger.info("Interest declined", interest_id=str(interest.id))
        project = await self.project_repo.get_by_id(interest.project_id)
        if project is not None:
            await self.notifier.project_event("interest.declined", project, [interest.admin_id])
        return interest

    async def list_requests(
        self,
        session: Session | None,
        status: InterestStatus | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[InterestRequest], str | None, bool]:
        """Every request for master admins; software admins see their own."""
        session = require_role(session, UserRole.SOFTWARE_ADMIN, UserRole.MASTER_ADMIN)
        if session.role == UserRole.MASTER_ADMIN:
            return await self.interest_repo.list_by_status(status, cursor, limit)
        return await self.interest_repo.list_for_admin(session.user_id, status, cursor, limit)

    async def _get(self, request_id: UUID) -> InterestRequest:
        interest = await self.interest_repo.get_by_id(request_id)
        if interest is None:
            raise NotFound("We couldn't find that request.")
        return interest
