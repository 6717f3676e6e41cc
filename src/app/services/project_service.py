"""Project lifecycle: intake, assignment, proposals and the work state machine.

Every status change is a conditional write against the stored status
(``ProjectRepository.transition``), so of two concurrent attempts from the same
state exactly one succeeds and the other gets InvalidTransition.

    submitted   -> assigned      master admin assigns an admin
    assigned    -> proposed      assigned admin sends a proposal
    proposed    -> accepted      client accepts (needs a saved payment method)
    proposed    -> assigned      client rejects; admin may propose again
    accepted    -> in_progress   admin starts work
    in_progress -> completed     admin completes; final invoice is created
    any non-terminal -> cancelled
"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import (
    ConflictingProposal,
    FlowFixError,
    InvalidTransition,
    NotFound,
    PaymentMethodRequired,
    ValidationError,
)
from src.app.core.logging import get_logger
from src.app.models import (
    AuditAction,
    Invoice,
    PricingType,
    Project,
    ProjectStatus,
    Proposal,
    ProposalStatus,
    UserRole,
)
from src.app.models.base import utc_now
from src.app.repositories import (
    InvoiceRepository,
    ProjectRepository,
    ProposalRepository,
    UserRepository,
)
from src.app.schemas.project import ProjectCreate
from src.app.schemas.proposal import ProposalCreate, pricing_error
from src.app.services.audit_service import AuditService
from src.app.services.authorization import (
    AccessDecision,
    Authorizer,
    ProjectAction,
    Session,
    require_role,
    require_session,
)
from src.app.services.billing_service import BillingService
from src.app.services.notifier import MASTER_ADMINS, ProjectNotifier

logger = get_logger(__name__)

NON_TERMINAL = (
    ProjectStatus.SUBMITTED,
    ProjectStatus.ASSIGNED,
    ProjectStatus.PROPOSED,
    ProjectStatus.ACCEPTED,
    ProjectStatus.IN_PROGRESS,
)

_TRANSITION_MESSAGES = {
    ProjectStatus.ASSIGNED: "Only newly submitted projects can be assigned.",
    ProjectStatus.PROPOSED: "A proposal can only be sent for an assigned project.",
    ProjectStatus.ACCEPTED: "Only a project with a pending proposal can be accepted.",
    ProjectStatus.IN_PROGRESS: "Work can only start after a proposal is accepted.",
    ProjectStatus.COMPLETED: "Only a project in progress can be marked complete.",
    ProjectStatus.CANCELLED: "This project can't be cancelled once it is {status}.",
}


def transition_error(target: ProjectStatus, current: str | None) -> InvalidTransition:
    """User-facing explanation for a refused transition."""
    message = _TRANSITION_MESSAGES.get(target, InvalidTransition.default_message)
    readable = (current or "gone").replace("_", " ")
    return InvalidTransition(message.format(status=readable))


class ProjectService:
    """Service for project and proposal lifecycle operations."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        proposal_repo: ProposalRepository,
        invoice_repo: InvoiceRepository,
        user_repo: UserRepository,
        session: AsyncSession,
        authorizer: Authorizer,
        audit_service: AuditService,
        billing: BillingService,
        notifier: ProjectNotifier,
    ):
        self.project_repo = project_repo
        self.proposal_repo = proposal_repo
        self.invoice_repo = invoice_repo
        self.user_repo = user_repo
        self.session = session
        self.authorizer = authorizer
        self.audit_service = audit_service
        self.billing = billing
        self.notifier = notifier

    # --- Reads ---------------------------------------------------------

    async def get_project(
        self, session: Session | None, project_id: UUID, action: ProjectAction = ProjectAction.VIEW
    ) -> tuple[Project, AccessDecision]:
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFound("We couldn't find that project.")
        decision = await self.authorizer.check(session, project, action)
        return project, decision

    async def list_projects(
        self,
        session: Session | None,
        cursor: str | None = None,
        limit: int = 50,
        status: ProjectStatus | None = None,
    ) -> tuple[list[Project], str | None, bool]:
        """Projects visible to the caller: own (client), assigned (admin) or all (master)."""
        session = require_role(session, *UserRole)
        if session.role == UserRole.MASTER_ADMIN:
            return await self.project_repo.list_all(cursor, limit, status)
        if session.role == UserRole.SOFTWARE_ADMIN:
            return await self.project_repo.list_for_admin(session.user_id, cursor, limit, status)
        return await self.project_repo.list_for_client(session.user_id, cursor, limit, status)

    async def list_open(
        self, session: Session | None, cursor: str | None = None, limit: int = 50
    ) -> tuple[list[Project], str | None, bool]:
        """Unassigned submitted projects that admins can ask to take on."""
        require_role(session, UserRole.SOFTWARE_ADMIN, UserRole.MASTER_ADMIN)
        return await self.project_repo.list_open(cursor, limit)

    async def get_proposal(
        self, session: Session | None, proposal_id: UUID
    ) -> tuple[Proposal, AccessDecision]:
        proposal = await self.proposal_repo.get_by_id(proposal_id)
        if proposal is None:
            raise NotFound("We couldn't find that proposal.")
        _, decision = await self.get_project(session, proposal.project_id)
        return proposal, decision

    async def list_proposals(
        self, session: Session | None, project_id: UUID
    ) -> tuple[list[Proposal], AccessDecision]:
        _, decision = await self.get_project(session, project_id)
        return await self.proposal_repo.list_for_project(project_id), decision

    # --- Intake & assignment --------------------------------------------

    async def create_project(self, session: Session | None, data: ProjectCreate) -> Project:
        session = require_role(session, UserRole.CLIENT)
        project = Project(
            client_id=session.user_id,
            title=data.title,
            description=data.description,
            repository_url=data.repository_url,
            budget=data.budget,
        )
        try:
            self.project_repo.add(project)
            await self.session.commit()
            await self.session.refresh(project)
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to create project", error=str(e))
            raise

        logger.info("Project submitted", project_id=str(project.id))
        await self.notifier.project_event("project.submitted", project, [MASTER_ADMINS])
        return project

    async def assign(self, session: Session | None, project_id: UUID, admin_id: UUID) -> Project:
        session = require_role(session, UserRole.MASTER_ADMIN)
        project, _ = await self.get_project(session, project_id, ProjectAction.ASSIGN)

        admin = await self.user_repo.get_by_id(admin_id)
        if admin is None or not admin.is_active or not admin.role_enum.is_admin:
            raise ValidationError("Projects can only be assigned to an active admin.")

        await self._apply(
            project,
            (ProjectStatus.SUBMITTED,),
            ProjectStatus.ASSIGNED,
            assigned_admin_id=admin_id,
        )
        await self.audit_service.log_success(
            AuditAction.PROJECT_ASSIGN,
            entity_type="project",
            entity_id=project.id,
            actor_id=session.user_id,
            changes={"assigned_admin_id": str(admin_id)},
        )
        await self.notifier.project_event(
            "project.assigned", project, [admin_id], exclude=session.user_id
        )
        return project

    # --- Proposals ----------------------------------------------------

    async def create_proposal(
        self, session: Session | None, project_id: UUID, data: ProposalCreate
    ) -> Proposal:
        session = require_session(session)
        project, _ = await self.get_project(session, project_id, ProjectAction.PROPOSE)

        error = pricing_error(
            data.pricing_type, data.hourly_rate, data.estimated_hours, data.fix_fee
        )
        if error:
            raise ValidationError(error)
        if await self.proposal_repo.get_pending_for_project(project.id) is not None:
            raise ConflictingProposal()

        hourly = data.pricing_type == PricingType.HOURLY
        proposal = Proposal(
            project_id=project.id,
            author_id=session.user_id,
            pricing_type=data.pricing_type.value,
            hourly_rate=data.hourly_rate if hourly else None,
            estimated_hours=data.estimated_hours if hourly else None,
            fix_fee=None if hourly else data.fix_fee,
            notes=data.notes,
        )
        try:
            if not await self.project_repo.transition(
                project.id, (ProjectStatus.ASSIGNED,), ProjectStatus.PROPOSED
            ):
                raise await self._refused(project.id, ProjectStatus.PROPOSED)
            self.proposal_repo.add(proposal)
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            # Partial unique index: another pending proposal won the race
            await self.session.rollback()
            raise ConflictingProposal() from e
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(proposal)
        await self.session.refresh(project)
        logger.info(
            "Proposal created",
            project_id=str(project.id),
            proposal_id=str(proposal.id),
            pricing_type=proposal.pricing_type,
        )
        await self.notifier.project_event(
            "proposal.created", project, [project.client_id], exclude=session.user_id
        )
        return proposal

    async def accept_proposal(self, session: Session | None, proposal_id: UUID) -> Proposal:
        """Accept a pending proposal. The client must already have a saved payment method."""
        proposal, project = await self._proposal_with_project(proposal_id)
        await self.authorizer.check(session, project, ProjectAction.ACCEPT_PROPOSAL)

        client = await self.user_repo.get_by_id(project.client_id)
        if client is None or not client.has_payment_method:
            raise PaymentMethodRequired()

        await self._decide(proposal, project, ProposalStatus.ACCEPTED, ProjectStatus.ACCEPTED)
        await self.notifier.project_event(
            "proposal.accepted", project, [project.assigned_admin_id, proposal.author_id]
        )
        return proposal

    async def reject_proposal(self, session: Session | None, proposal_id: UUID) -> Proposal:
        """Reject a pending proposal; the project returns to ``assigned``."""
        proposal, project = await self._proposal_with_project(proposal_id)
        await self.authorizer.check(session, project, ProjectAction.REJECT_PROPOSAL)

        await self._decide(proposal, project, ProposalStatus.REJECTED, ProjectStatus.ASSIGNED)
        await self.notifier.project_event(
            "proposal.rejected", project, [project.assigned_admin_id, proposal.author_id]
        )
        return proposal

    # --- Work ---------------------------------------------------------

    async def start(self, session: Session | None, project_id: UUID) -> Project:
        project, _ = await self.get_project(session, project_id, ProjectAction.START)
        await self._apply(
            project, (ProjectStatus.ACCEPTED,), ProjectStatus.IN_PROGRESS, started_at=utc_now()
        )
        await self.notifier.project_event("project.started", project, [project.client_id])
        return project

    async def complete(
        self, session: Session | None, project_id: UUID
    ) -> tuple[Project, Invoice | None]:
        """Mark work complete and create the final invoice in the same transaction.

        Refused while an earlier invoice is still pending or failed.
        """
        project, _ = await self.get_project(session, project_id, ProjectAction.COMPLETE)

        try:
            locked = await self.project_repo.get_for_update(project.id)
            if locked is None:
                raise NotFound("We couldn't find that project.")
            if await self.invoice_repo.count_outstanding(project.id):
                raise InvalidTransition(
                    "This project has unpaid invoices. "
                    "They must be paid before it can be completed."
                )
            if not await self.project_repo.transition(
                project.id,
                (ProjectStatus.IN_PROGRESS,),
                ProjectStatus.COMPLETED,
                completed_at=utc_now(),
            ):
                raise await self._refused(project.id, ProjectStatus.COMPLETED)

            invoice = await self.billing.create_final_invoice(locked)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(project)
        logger.info(
            "Project completed",
            project_id=str(project.id),
            invoice_id=str(invoice.id) if invoice else None,
        )
        await self.notifier.project_event("project.completed", project, [project.client_id])
        if invoice is not None:
            await self.notifier.invoice_event(
                "invoice.created", invoice, project, [project.client_id]
            )
        return project, invoice

    async def cancel(self, session: Session | None, project_id: UUID) -> Project:
        """Cancel from any non-terminal state. A pending proposal is rejected with it."""
        session = require_session(session)
        project, _ = await self.get_project(session, project_id, ProjectAction.CANCEL)
        previous_status = project.status

        try:
            if not await self.project_repo.transition(
                project.id, NON_TERMINAL, ProjectStatus.CANCELLED, cancelled_at=utc_now()
            ):
                raise await self._refused(project.id, ProjectStatus.CANCELLED)
            pending = await self.proposal_repo.get_pending_for_project(project.id)
            if pending is not None:
                await self.proposal_repo.decide(pending.id, ProposalStatus.REJECTED)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(project)
        logger.info("Project cancelled", project_id=str(project.id))
        if session.role == UserRole.MASTER_ADMIN and session.user_id not in (
            project.client_id,
            project.assigned_admin_id,
        ):
            await self.audit_service.log_success(
                AuditAction.PROJECT_CANCEL,
                entity_type="project",
                entity_id=project.id,
                actor_id=session.user_id,
                changes={"from_status": previous_status, "to_status": project.status},
            )
        await self.notifier.project_event(
            "project.cancelled",
            project,
            [project.client_id, project.assigned_admin_id],
            exclude=session.user_id,
        )
        return project

    # --- Helpers ------------------------------------------------------

    async def _proposal_with_project(self, proposal_id: UUID) -> tuple[Proposal, Project]:
        proposal = await self.proposal_repo.get_by_id(proposal_id)
        if proposal is None:
            raise NotFound("We couldn't find that proposal.")
        project = await self.project_repo.get_by_id(proposal.project_id)
        if project is None:
            raise NotFound("We couldn't find that project.")
        return proposal, project

    async def _decide(
        self,
        proposal: Proposal,
        project: Project,
        decision: ProposalStatus,
        project_status: ProjectStatus,
    ) -> None:
        try:
            if not await self.proposal_repo.decide(proposal.id, decision):
                raise InvalidTransition("This proposal has already been decided.")
            if not await self.project_repo.transition(
                project.id, (ProjectStatus.PROPOSED,), project_status
            ):
                raise await self._refused(project.id, project_status)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(proposal)
        await self.session.refresh(project)
        logger.info(
            "Proposal decided",
            proposal_id=str(proposal.id),
            decision=decision.value,
            project_status=project.status,
        )

    async def _apply(
        self,
        project: Project,
        from_statuses: tuple[ProjectStatus, ...],
        to_status: ProjectStatus,
        **values: object,
    ) -> None:
        project_id = project.id
        try:
            if not await self.project_repo.transition(
                project_id, from_statuses, to_status, **values
            ):
                raise await self._refused(project_id, to_status)
            await self.session.commit()
        except FlowFixError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Project transition failed", project_id=str(project_id), error=str(e))
            raise

        await self.session.refresh(project)
        logger.info("Project transitioned", project_id=str(project.id), status=project.status)

    async def _refused(self, project_id: UUID, target: ProjectStatus) -> InvalidTransition:
        current = await self.project_repo.get_by_id(project_id)
        if current is not None:
            await self.session.refresh(current)
        logger.info(
            "Transition refused",
            project_id=str(project_id),
            target=target.value,
            current=current.status if current else None,
        )
        return transition_error(target, current.status if current else None)
