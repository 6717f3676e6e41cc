"""Session dependencies.

Every route except the payment webhook depends on ``CurrentSession``; services
receive the resolved ``Session`` and make the access decisions.
"""

from typing import Annotated

from fastapi import Depends, Request

from src.app.api.dependencies.db import DBSession
from src.app.api.dependencies.repositories import UserRepo
from src.app.core.exceptions import Unauthenticated
from src.app.core.logging import bind_user_context
from src.app.services.authorization import Session
from src.app.services.user_service import SessionResolver


def get_session_resolver(user_repo: UserRepo, session: DBSession) -> SessionResolver:
    return SessionResolver(user_repo, session)


async def get_current_session(
    request: Request,
    resolver: Annotated[SessionResolver, Depends(get_session_resolver)],
) -> Session:
    """Resolve the caller or fail with Unauthenticated."""
    session = await resolver.resolve(request)
    if session is None:
        raise Unauthenticated()
    bind_user_context(session.user_id, session.role.value, session.email)
    return session


CurrentSession = Annotated[Session, Depends(get_current_session)]
