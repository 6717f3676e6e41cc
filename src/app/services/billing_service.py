"""Billing: time entries, invoices and payment collection.

Invoicing an hourly project reads the unbilled time entries, sums them, creates
the invoice and attributes the entries to it, all while holding an exclusive lock
on the project row. Time-entry appends take a shared lock on the same row, so
they queue behind an invoice run instead of slipping between its read and write.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.exceptions import (
    InvalidTransition,
    NotFound,
    PaymentConfigurationError,
    ValidationError,
    WebhookRejected,
)
from src.app.core.logging import get_logger
from src.app.core.money import hourly_amount_cents
from src.app.core.payments import PaymentEvent, PaymentIntentResult, StripePaymentGateway
from src.app.models import (
    AuditAction,
    Invoice,
    InvoiceStatus,
    PricingType,
    Project,
    ProjectStatus,
    Proposal,
    TimeEntry,
    UserRole,
)
from src.app.repositories import (
    InvoiceRepository,
    ProjectRepository,
    ProposalRepository,
    TimeEntryRepository,
    UserRepository,
)
from src.app.schemas.billing import TimeEntryCreate
from src.app.services.audit_service import AuditService
from src.app.services.authorization import (
    AccessDecision,
    Authorizer,
    ProjectAction,
    Session,
    require_role,
    require_session,
)
from src.app.services.notifier import ProjectNotifier
from src.app.services.subscription_service import SubscriptionService

logger = get_logger(__name__)


class BillingService:
    """Service for time tracking, invoicing and payments."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        proposal_repo: ProposalRepository,
        time_entry_repo: TimeEntryRepository,
        invoice_repo: InvoiceRepository,
        user_repo: UserRepository,
        session: AsyncSession,
        authorizer: Authorizer,
        audit_service: AuditService,
        gateway: StripePaymentGateway,
        subscriptions: SubscriptionService,
        notifier: ProjectNotifier,
    ):
        self.project_repo = project_repo
        self.proposal_repo = proposal_repo
        self.time_entry_repo = time_entry_repo
        self.invoice_repo = invoice_repo
        self.user_repo = user_repo
        self.session = session
        self.authorizer = authorizer
        self.audit_service = audit_service
        self.gateway = gateway
        self.subscriptions = subscriptions
        self.notifier = notifier

    async def _project(
        self, session: Session | None, project_id: UUID, action: ProjectAction
    ) -> tuple[Project, AccessDecision]:
        project = await self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFound("We couldn't find that project.")
        return project, await self.authorizer.check(session, project, action)

    # --- Time entries -------------------------------------------------

    async def log_time(
        self, session: Session | None, project_id: UUID, data: TimeEntryCreate
    ) -> TimeEntry:
        """Append a time entry. Only allowed while work is in progress."""
        session = require_session(session)
        project, _ = await self._project(session, project_id, ProjectAction.LOG_TIME)

        try:
            locked = await self.project_repo.get_for_update(project.id, read=True)
            if locked is None or locked.status_enum != ProjectStatus.IN_PROGRESS:
                raise InvalidTransition("Time can only be logged while work is in progress.")

            entry = TimeEntry(
                project_id=project.id,
                admin_id=session.user_id,
                hours_spent=data.hours_spent,
                description=data.description,
            )
            self.time_entry_repo.add(entry)
            await self.subscriptions.record_usage(locked.client_id, data.hours_spent)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(entry)
        logger.info(
            "Time logged",
            project_id=str(project.id),
            time_entry_id=str(entry.id),
            hours=str(entry.hours_spent),
        )
        return entry

    async def list_time_entries(
        self,
        session: Session | None,
        project_id: UUID,
        cursor: str | None = None,
        limit: int = 100,
    ) -> tuple[list[TimeEntry], str | None, bool]:
        await self._project(session, project_id, ProjectAction.VIEW)
        return await self.time_entry_repo.list_for_project(project_id, cursor, limit)

    # --- Invoices -----------------------------------------------------

    async def create_invoice(self, session: Session | None, project_id: UUID) -> Invoice | None:
        """Bill all unbilled hours on an hourly project in progress.

        Returns None when there is nothing unbilled; no empty invoice is created.
        Flat-fee projects are invoiced only at completion.
        """
        project, _ = await self._project(session, project_id, ProjectAction.INVOICE)

        try:
            locked = await self.project_repo.get_for_update(project_id)
            if locked is None or locked.status_enum != ProjectStatus.IN_PROGRESS:
                raise InvalidTransition(
                    "Interim invoices can only be created while work is in progress."
                )
            proposal = await self._accepted_proposal(locked)
            if proposal.pricing_type_enum != PricingType.HOURLY:
                raise ValidationError(
                    "Flat-fee projects are invoiced automatically when the work is completed."
                )
            invoice = await self._bill_unbilled_hours(locked, proposal)
            if invoice is None:
                await self.session.rollback()
                logger.info("No unbilled hours to invoice", project_id=str(project_id))
                return None
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(invoice)
        await self.notifier.invoice_event(
            "invoice.created", invoice, project, [project.client_id]
        )
        return invoice

    async def create_final_invoice(self, project: Project) -> Invoice | None:
        """Create the completion invoice inside the caller's transaction (no commit).

        Flat fee: the accepted proposal's fee. Hourly: every remaining unbilled hour,
        or None if all hours were already billed.
        """
        proposal = await self._accepted_proposal(project)
        if proposal.pricing_type_enum == PricingType.FLAT_FEE:
            if proposal.fix_fee is None:
                raise ValidationError("The accepted proposal has no fee.")
            invoice = Invoice(project_id=project.id, amount=proposal.fix_fee)
            self.invoice_repo.add(invoice)
            await self.session.flush()
            logger.info(
                "Flat-fee invoice created", project_id=str(project.id), invoice_id=str(invoice.id)
            )
            return invoice
        return await self._bill_unbilled_hours(project, proposal)

    async def _accepted_proposal(self, project: Project) -> Proposal:
        proposal = await self.proposal_repo.get_accepted_for_project(project.id)
        if proposal is None:
            raise InvalidTransition("This project has no accepted proposal to bill against.")
        return proposal

    async def _bill_unbilled_hours(self, project: Project, proposal: Proposal) -> Invoice | None:
        """Caller must hold the project row lock."""
        if proposal.hourly_rate is None:
            raise ValidationError("The accepted proposal has no hourly rate.")

        entries = await self.time_entry_repo.list_unbilled(project.id)
        if not entries:
            return None

        hours = sum((e.hours_spent for e in entries), Decimal("0"))
        invoice = Invoice(
            project_id=project.id,
            amount=hourly_amount_cents(hours, proposal.hourly_rate),
            hours_billed=hours,
            billed_through=max(e.logged_at for e in entries),
        )
        self.invoice_repo.add(invoice)
        await self.session.flush()

        attributed = await self.time_entry_repo.attribute_to_invoice(
            [e.id for e in entries], invoice.id
        )
        if attributed != len(entries):
            raise InvalidTransition("Some hours were billed by another request. Please try again.")

        logger.info(
            "Hourly invoice created",
            project_id=str(project.id),
            invoice_id=str(invoice.id),
            hours=str(hours),
            entries=attributed,
        )
        return invoice

    async def list_invoices(
        self, session: Session | None, project_id: UUID
    ) -> tuple[list[Invoice], AccessDecision]:
        _, decision = await self._project(session, project_id, ProjectAction.VIEW)
        return await self.invoice_repo.list_for_project(project_id), decision

    async def get_invoice(
        self, session: Session | None, invoice_id: UUID, action: ProjectAction = ProjectAction.VIEW
    ) -> tuple[Invoice, AccessDecision]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        if invoice is None:
            raise NotFound("We couldn't find that invoice.")
        _, decision = await self._project(session, invoice.project_id, action)
        return invoice, decision

    # --- Payments -----------------------------------------------------

    async def create_payment_intent(
        self, session: Session | None, invoice_id: UUID
    ) -> PaymentIntentResult:
        """Ask the processor for a payment intent covering the invoice amount.

        An unconfigured processor yields ``requires_setup`` rather than an error, so
        the payment page can tell the user to contact support instead of retrying.
        """
        invoice, _ = await self.get_invoice(session, invoice_id, ProjectAction.PAY)
        if invoice.status_enum == InvoiceStatus.PAID:
            raise InvalidTransition("This invoice has already been paid.")

        if not self.gateway.configured:
            return PaymentIntentResult.not_configured()

        project = await self.project_repo.get_by_id(invoice.project_id)
        client = await self.user_repo.get_by_id(project.client_id) if project else None

        result = await self.gateway.create_payment_intent(
            invoice.amount,
            client.stripe_customer_id if client else None,
            invoice_id=str(invoice.id),
            idempotency_key=f"invoice-{invoice.id}-{invoice.payment_attempts}",
            payment_method=client.saved_payment_method_ref if client else None,
        )
        if result.payment_intent_id:
            try:
                await self.invoice_repo.attach_payment_intent(invoice.id, result.payment_intent_id)
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
        logger.info(
            "Payment intent created",
            invoice_id=str(invoice.id),
            payment_intent_id=result.payment_intent_id,
        )
        return result

    async def create_setup_intent(self, session: Session | None) -> tuple[str, str]:
        """Start saving a payment method for the signed-in client.

        Creates the processor-side customer on first use.

        Returns:
            Tuple of (client_secret, customer_id)
        """
        session = require_role(session, UserRole.CLIENT)
        if not self.gateway.configured:
            raise PaymentConfigurationError()

        user = await self.user_repo.get_by_id(session.user_id)
        if user is None:
            raise NotFound("We couldn't find your account.")

        customer_id = user.stripe_customer_id
        if customer_id is None:
            customer_id = await self.gateway.create_customer(
                user.email, user.full_name, str(user.id)
            )
            try:
                user.stripe_customer_id = customer_id
                self.user_repo.add(user)
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            logger.info("Payment customer created", user_id=str(user.id))

        client_secret = await self.gateway.create_setup_intent(customer_id, str(user.id))
        return client_secret, customer_id

    async def handle_webhook(self, payload: bytes, signature: str | None) -> str:
        """Apply a verified processor event. Returns a short outcome label.

        Unverifiable events are rejected, logged and audited; they never change state.
        """
        try:
            event = self.gateway.verify_webhook(payload, signature)
        except WebhookRejected as e:
            logger.warning("Webhook rejected", reason=e.message)
            await self.audit_service.log_failure(
                AuditAction.WEBHOOK_REJECTED, entity_type="payment", error_message=e.message
            )
            raise

        logger.info("Webhook received", event_type=event.type, object_id=event.object_id)
        if event.type == "payment_intent.succeeded":
            return await self._payment_succeeded(event)
        if event.type == "payment_intent.payment_failed":
            return await self._payment_failed(event)
        if event.type == "setup_intent.succeeded":
            return await self._payment_method_saved(event)
        return "ignored"

    async def _invoice_for_event(self, event: PaymentEvent) -> Invoice | None:
        if event.invoice_id:
            try:
                return await self.invoice_repo.get_by_id(UUID(event.invoice_id))
            except ValueError:
                logger.warning("Webhook carries a malformed invoice id", object_id=event.object_id)
                return None
        if event.object_id:
            return await self.invoice_repo.get_by_payment_intent(event.object_id)
        return None

    async def _payment_succeeded(self, event: PaymentEvent) -> str:
        invoice = await self._invoice_for_event(event)
        if invoice is None:
            logger.warning("Payment for unknown invoice", payment_intent_id=event.object_id)
            return "ignored"

        try:
            paid = await self.invoice_repo.mark_paid(invoice.id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        if not paid:
            logger.info("Invoice already paid", invoice_id=str(invoice.id))
            return "already_paid"

        await self.session.refresh(invoice)
        logger.info("Invoice paid", invoice_id=str(invoice.id))
        project = await self.project_repo.get_by_id(invoice.project_id)
        if project is not None:
            await self.notifier.invoice_event("invoice.paid", invoice, project, [project.client_id])
            await self.notifier.project_event(
                "invoice.settled", project, [project.assigned_admin_id], invoice_id=str(invoice.id)
            )
        return "paid"

    async def _payment_failed(self, event: PaymentEvent) -> str:
        invoice = await self._invoice_for_event(event)
        if invoice is None or event.object_id is None:
            logger.warning("Payment failure for unknown invoice", payment_intent_id=event.object_id)
            return "ignored"

        try:
            failed = await self.invoice_repo.mark_failed(invoice.id, event.object_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        if not failed:
            logger.info("Stale payment failure ignored", invoice_id=str(invoice.id))
            return "ignored"

        await self.session.refresh(invoice)
        logger.info(
            "Invoice payment failed",
            invoice_id=str(invoice.id),
            attempts=invoice.payment_attempts,
            reason=event.failure_message,
        )
        project = await self.project_repo.get_by_id(invoice.project_id)
        if project is not None:
            await self.notifier.invoice_event(
                "invoice.payment_failed", invoice, project, [project.client_id]
            )
        return "failed"

    async def _payment_method_saved(self, event: PaymentEvent) -> str:
        if not event.payment_method:
            return "ignored"

        user = None
        if event.customer:
            user = await self.user_repo.get_by_stripe_customer(event.customer)
        if user is None and event.user_id:
            try:
                user = await self.user_repo.get_by_id(UUID(event.user_id))
            except ValueError:
                user = None
        if user is None:
            logger.warning("Saved payment method for unknown customer", customer=event.customer)
            return "ignored"

        try:
            user.saved_payment_method_ref = event.payment_method
            self.user_repo.add(user)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to save payment method", user_id=str(user.id), error=str(e))
            raise
        logger.info("Payment method saved", user_id=str(user.id))
        return "payment_method_saved"
