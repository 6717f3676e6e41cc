"""Users and session resolution."""

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import NotFound
from src.app.core.logging import get_logger
from src.app.core.security import decode_session_token
from src.app.models import User, UserRole
from src.app.repositories import UserRepository
from src.app.services.authorization import Session, require_role

logger = get_logger(__name__)


def _split_name(name: str | None) -> tuple[str | None, str | None]:
    if not name or not name.strip():
        return None, None
    first, _, last = name.strip().partition(" ")
    return first, last.strip() or None


class SessionResolver:
    """Turns the identity provider's bearer token into a ``Session``.

    Users are provisioned as clients the first time they are seen. The role
    always comes from our own store.
    """

    def __init__(self, user_repo: UserRepository, session: AsyncSession):
        self.user_repo = user_repo
        self.session = session

    async def resolve(self, request: Request) -> Session | None:
        auth = request.headers.get("authorization", "")
        scheme, _, token = auth.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        claims = decode_session_token(token.strip())
        if claims is None:
            logger.debug("Session token rejected")
            return None

        user = await self.user_repo.get_by_external_id(str(claims["sub"]))
        if user is None:
            user = await self._provision(claims)
        if user is None or not user.is_active:
            return None
        return Session(user_id=user.id, role=user.role_enum, email=user.email)

    async def _provision(self, claims: dict[str, object]) -> User | None:
        email = str(claims["email"]).lower().strip()
        if await self.user_repo.get_by_email(email) is not None:
            logger.warning("Session e-mail is linked to another account")
            return None

        first, last = _split_name(claims.get("name"))  # type: ignore[arg-type]
        user = User(
            external_id=str(claims["sub"]),
            email=email,
            first_name=first,
            last_name=last,
            role=UserRole.CLIENT.value,
        )
        try:
            self.user_repo.add(user)
            await self.session.commit()
        except IntegrityError:
            # Concurrent first request for the same subject
            await self.session.rollback()
            existing = await self.user_repo.get_by_external_id(str(claims["sub"]))
            if existing is None:
                raise
            return existing

        await self.session.refresh(user)
        logger.info("User provisioned", user_id=str(user.id))
        return user


class UserService:
    """User management service."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def get_me(self, session: Session | None) -> User:
        session = require_role(session, *UserRole)
        user = await self.user_repo.get_by_id(session.user_id)
        if user is None:
            raise NotFound("We couldn't find your account.")
        return user

    async def list_admins(self, session: Session | None) -> list[User]:
        require_role(session, UserRole.MASTER_ADMIN)
        return await self.user_repo.list_by_role(UserRole.SOFTWARE_ADMIN, UserRole.MASTER_ADMIN)
