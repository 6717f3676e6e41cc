"""Client ratings of the admin who delivered a completed project."""

from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import AlreadyRated, InvalidTransition, NotFound
from src.app.core.logging import get_logger
from src.app.models import AuditAction, ProjectStatus, Rating, UserRole
from src.app.repositories import ProjectRepository, RatingRepository, UserRepository
from src.app.schemas.rating import RatingCreate
from src.app.services.audit_service import AuditService
from src.app.services.authorization import Authorizer, ProjectAction, Session, require_role
from src.app.services.notifier import ProjectNotifier

logger = get_logger(__name__)


class RatingService:
    def __init__(
        self,
        rating_repo: RatingRepository,
        project_repo: ProjectRepository,
        user_repo: UserRepository,
        session: AsyncSession,
        authorizer: Authorizer,
        audit_service: AuditService,
        notifier: ProjectNotifier,
    ):
        self.rating_repo = rating_repo
        self.project_repo = project_repo
        self.user_repo = user_repo
        self.session = session
        self.authorizer = authorizer
        self.audit_service = audit_service
        self.notifier = notifier

    async def rate(self, session: Session | None, data: RatingCreate) -> Rating:
        """Rate the assigned admin of the caller's completed project. Once per project."""
        session = require_role(session, UserRole.CLIENT)
        project = await self.project_repo.get_by_id(data.project_id)
        if project is None:
            raise NotFound("We couldn't find that project.")
        await self.authorizer.check(session, project, ProjectAction.RATE)
        if project.status_enum != ProjectStatus.COMPLETED or project.assigned_admin_id is None:
            raise InvalidTransition("Only completed projects can be rated.")
        if await self.rating_repo.get_for_project(project.id) is not None:
            raise AlreadyRated()

        rating = Rating(
            project_id=project.id,
            client_id=session.user_id,
            admin_id=project.assigned_admin_id,
            stars=data.stars,
            comment=data.comment,
        )
        try:
            self.rating_repo.add(rating)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise AlreadyRated() from e
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(rating)
        logger.info(
            "Project rated",
            rating_id=str(rating.id),
            project_id=str(project.id),
            stars=rating.stars,
        )
        await self.notifier.project_event(
            "rating.received", project, [rating.admin_id], stars=rating.stars
        )
        return rating

    async def list_ratings(
        self,
        session: Session | None,
        admin_id: UUID | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[Rating], str | None, bool]:
        """Master admins see every rating, hidden ones included, optionally per admin.

        Software admins see their visible ratings; clients see the ratings they wrote.
        """
        session = require_role(session, *UserRole)
        if session.role == UserRole.MASTER_ADMIN:
            return await self.rating_repo.list_ratings(
                cursor, limit, admin_id=admin_id, include_hidden=True
            )
        if session.role == UserRole.SOFTWARE_ADMIN:
            return await self.rating_repo.list_ratings(cursor, limit, admin_id=session.user_id)
        return await self.rating_repo.list_ratings(
            cursor, limit, client_id=session.user_id, include_hidden=True
        )

    async def admin_summaries(self, session: Session | None) -> list[dict[str, Any]]:
        """Per-admin rating count and average, highest average first."""
        require_role(session, UserRole.MASTER_ADMIN)
        summaries = []
        for admin_id, count, average in await self.rating_repo.admin_averages():
            admin = await self.user_repo.get_by_id(admin_id)
            if admin is None:
                continue
            summaries.append({"admin": admin, "ratings": count, "average_stars": average})
        return summaries

    async def hide(self, session: Session | None, rating_id: UUID) -> Rating:
        """Hide a rating from admins and from averages. Audited."""
        session = require_role(session, UserRole.MASTER_ADMIN)
        rating = await self.rating_repo.get_by_id(rating_id)
        if rating is None:
            raise NotFound("We couldn't find that rating.")

        try:
            if not await self.rating_repo.hide(rating.id, session.user_id):
                raise InvalidTransition("This rating is already hidden.")
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(rating)
        await self.audit_service.log_success(
            AuditAction.RATING_HIDE,
            entity_type="rating",
            entity_id=rating.id,
            actor_id=session.user_id,
            changes={"admin_id": str(rating.admin_id), "stars": rating.stars},
        )
        logger.info("Rating hidden", rating_id=str(rating.id))
        return rating
