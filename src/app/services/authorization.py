"""Role-based access decisions for projects and their sub-resources.

Precedence:
    1. no session                      -> Unauthenticated
    2. master_admin                    -> allowed everywhere; acting outside their own
                                          projects is an audited override
    3. software_admin                  -> only projects assigned to them
    4. client                          -> only projects they own
    5. anything else                   -> Forbidden
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from src.app.core.exceptions import Forbidden, Unauthenticated
from src.app.core.logging import get_logger
from src.app.models import AuditAction, Project, UserRole
from src.app.services.audit_service import AuditService

logger = get_logger(__name__)


@dataclass(frozen=True)
class Session:
    """The caller, as resolved from the identity provider's session token."""

    user_id: UUID
    role: UserRole
    email: str | None = None

    @property
    def can_view_pricing(self) -> bool:
        return self.role != UserRole.SOFTWARE_ADMIN


class ProjectAction(str, Enum):
    VIEW = "view"
    CANCEL = "cancel"
    ASSIGN = "assign"
    PROPOSE = "propose"
    ACCEPT_PROPOSAL = "accept_proposal"
    REJECT_PROPOSAL = "reject_proposal"
    START = "start"
    COMPLETE = "complete"
    LOG_TIME = "log_time"
    INVOICE = "invoice"
    PAY = "pay"
    MESSAGE = "message"
    RATE = "rate"


# What each party may do on a project inside its own scope.
CLIENT_ACTIONS = frozenset(
    {
        ProjectAction.VIEW,
        ProjectAction.CANCEL,
        ProjectAction.ACCEPT_PROPOSAL,
        ProjectAction.REJECT_PROPOSAL,
        ProjectAction.PAY,
        ProjectAction.MESSAGE,
        ProjectAction.RATE,
    }
)
ASSIGNED_ADMIN_ACTIONS = frozenset(
    {
        ProjectAction.VIEW,
        ProjectAction.PROPOSE,
        ProjectAction.START,
        ProjectAction.COMPLETE,
        ProjectAction.LOG_TIME,
        ProjectAction.INVOICE,
        ProjectAction.MESSAGE,
    }
)
# Master-admin duties that are never overrides.
MASTER_ACTIONS = frozenset({ProjectAction.VIEW, ProjectAction.ASSIGN, ProjectAction.CANCEL})


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    override: bool = False
    can_view_pricing: bool = False


_DENY = AccessDecision(allowed=False)


def _owned_actions(session: Session, project: Project) -> frozenset[ProjectAction]:
    actions: frozenset[ProjectAction] = frozenset()
    if project.client_id == session.user_id:
        actions |= CLIENT_ACTIONS
    if project.assigned_admin_id == session.user_id:
        actions |= ASSIGNED_ADMIN_ACTIONS
    return actions


def evaluate(session: Session, project: Project, action: ProjectAction) -> AccessDecision:
    """Decide whether ``session`` may perform ``action`` on ``project``."""
    owned = _owned_actions(session, project)

    if session.role == UserRole.MASTER_ADMIN:
        override = action not in owned and action not in MASTER_ACTIONS
        return AccessDecision(allowed=True, override=override, can_view_pricing=True)

    if session.role == UserRole.SOFTWARE_ADMIN:
        allowed = (
            project.assigned_admin_id == session.user_id and action in ASSIGNED_ADMIN_ACTIONS
        )
        return AccessDecision(allowed=True) if allowed else _DENY

    if session.role == UserRole.CLIENT:
        allowed = project.client_id == session.user_id and action in CLIENT_ACTIONS
        return AccessDecision(allowed=True, can_view_pricing=True) if allowed else _DENY

    return _DENY


def require_session(session: Session | None) -> Session:
    if session is None:
        raise Unauthenticated()
    return session


def require_role(session: Session | None, *roles: UserRole) -> Session:
    """Gate for operations that are not scoped to a single project."""
    session = require_session(session)
    if session.role not in roles:
        raise Forbidden()
    return session


class Authorizer:
    """Applies ``evaluate`` and records master-admin overrides."""

    def __init__(self, audit_service: AuditService):
        self.audit_service = audit_service

    async def check(
        self, session: Session | None, project: Project, action: ProjectAction
    ) -> AccessDecision:
        session = require_session(session)
        decision = evaluate(session, project, action)
        if not decision.allowed:
            logger.info(
                "Access denied",
                action=action.value,
                project_id=str(project.id),
                role=session.role.value,
            )
            raise Forbidden()

        if decision.override:
            logger.info(
                "Master admin override",
                action=action.value,
                project_id=str(project.id),
            )
            await self.audit_service.log_success(
                AuditAction.PROJECT_OVERRIDE,
                entity_type="project",
                entity_id=project.id,
                actor_id=session.user_id,
                changes={"action": action.value, "status": project.status},
            )
        return decision
