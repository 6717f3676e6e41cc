"""Admin invites: the only way a user's role is elevated."""

from datetime import timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.config import get_settings
from src.app.core.exceptions import Forbidden, InvalidTransition, NotFound
from src.app.core.logging import get_logger
from src.app.core.notifications import NotificationDispatcher
from src.app.core.security import generate_token, hash_token
from src.app.models import AdminInvite, AuditAction, User, UserRole
from src.app.models.base import utc_now
from src.app.repositories import AdminInviteRepository, UserRepository
from src.app.services.audit_service import AuditService
from src.app.services.authorization import Session, require_role

logger = get_logger(__name__)

INVALID_INVITE = "This invite link is invalid or has expired."


class InviteService:
    """Service for admin invite operations."""

    def __init__(
        self,
        invite_repo: AdminInviteRepository,
        user_repo: UserRepository,
        session: AsyncSession,
        audit_service: AuditService,
        dispatcher: NotificationDispatcher,
    ):
        self.invite_repo = invite_repo
        self.user_repo = user_repo
        self.session = session
        self.audit_service = audit_service
        self.dispatcher = dispatcher

    async def create_invite(self, session: Session | None, email: str) -> tuple[AdminInvite, str]:
        """Create and send an invite.

        Returns (invite, plaintext_token). An earlier pending invite for the same
        e-mail is cancelled (resend behavior).
        """
        session = require_role(session, UserRole.MASTER_ADMIN)
        settings = get_settings()
        email = email.lower().strip()

        existing = await self.user_repo.get_by_email(email)
        if existing is not None and existing.role_enum.is_admin:
            raise InvalidTransition("This person is already an admin.")

        token = generate_token()
        invite = AdminInvite(
            email=email,
            token_hash=hash_token(token),
            invited_by_id=session.user_id,
            expires_at=utc_now() + timedelta(days=settings.admin_invite_expire_days),
        )
        try:
            await self.invite_repo.invalidate_existing(email)
            self.invite_repo.add(invite)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to create invite", error=str(e))
            raise

        await self.session.refresh(invite)
        inviter = await self.user_repo.get_by_id(session.user_id)
        self.dispatcher.notify(
            "admin.invited",
            {
                "recipients": [email],
                "token": token,
                "inviter_name": inviter.full_name if inviter else "A master admin",
            },
        )
        await self.audit_service.log_success(
            AuditAction.ADMIN_INVITE,
            entity_type="admin_invite",
            entity_id=invite.id,
            actor_id=session.user_id,
            changes={"email": email, "role": invite.role},
        )
        logger.info("Admin invite created", invite_id=str(invite.id))
        return invite, token

    async def get_invite_info(self, token: str) -> dict[str, Any]:
        """Public info shown on the signup page before accepting."""
        invite = await self.invite_repo.get_valid_by_hash(hash_token(token))
        if invite is None:
            raise NotFound(INVALID_INVITE)
        return {"email": invite.email, "role": invite.role, "expires_at": invite.expires_at}

    async def accept_invite(self, session: Session | None, token: str) -> User:
        """Elevate the signed-in client to software_admin.

        The caller's e-mail must match the invite. Invites are single-use.
        """
        session = require_role(session, *UserRole)
        invite = await self.invite_repo.get_valid_by_hash(hash_token(token))
        if invite is None:
            raise NotFound(INVALID_INVITE)

        user = await self.user_repo.get_by_id(session.user_id)
        if user is None:
            raise NotFound("We couldn't find your account.")
        if user.email.lower() != invite.email.lower():
            raise Forbidden("This invite was sent to a different e-mail address.")

        try:
            if not await self.invite_repo.mark_accepted(invite.id, user.id):
                raise NotFound(INVALID_INVITE)
            if not await self.user_repo.change_role(
                user.id, UserRole.CLIENT, UserRole(invite.role)
            ):
                raise InvalidTransition("Only client accounts can accept an admin invite.")
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(user)
        await self.audit_service.log_success(
            AuditAction.ROLE_ELEVATE,
            entity_type="user",
            entity_id=user.id,
            actor_id=user.id,
            changes={
                "from_role": UserRole.CLIENT.value,
                "to_role": user.role,
                "invite_id": str(invite.id),
            },
        )
        logger.info("Admin invite accepted", invite_id=str(invite.id), user_id=str(user.id))
        return user

    async def list_pending(
        self, session: Session | None, cursor: str | None = None, limit: int = 50
    ) -> tuple[list[AdminInvite], str | None, bool]:
        require_role(session, UserRole.MASTER_ADMIN)
        return await self.invite_repo.list_pending(cursor, limit)
