"""Builds notification payloads for lifecycle events and hands them to the dispatcher."""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from src.app.core.logging import get_logger
from src.app.core.money import format_cents
from src.app.core.notifications import NotificationDispatcher
from src.app.models import Invoice, Project, UserRole
from src.app.repositories import UserRepository

logger = get_logger(__name__)

MASTER_ADMINS = "master_admins"


class ProjectNotifier:
    """Resolves recipients and calls ``dispatcher.notify``.

    Only call after the triggering transaction has committed. Never raises.
    """

    def __init__(self, user_repo: UserRepository, dispatcher: NotificationDispatcher):
        self.user_repo = user_repo
        self.dispatcher = dispatcher

    async def project_event(
        self,
        event_kind: str,
        project: Project,
        recipients: Iterable[UUID | str | None],
        exclude: UUID | None = None,
        **extra: Any,
    ) -> None:
        payload = {
            "project_id": str(project.id),
            "project_title": project.title,
            "status": project.status,
            **extra,
        }
        await self._send(event_kind, payload, recipients, exclude)

    async def invoice_event(
        self,
        event_kind: str,
        invoice: Invoice,
        project: Project,
        recipients: Iterable[UUID | str | None],
    ) -> None:
        await self.project_event(
            event_kind,
            project,
            recipients,
            invoice_id=str(invoice.id),
            amount=format_cents(invoice.amount),
        )

    async def _send(
        self,
        event_kind: str,
        payload: dict[str, Any],
        recipients: Iterable[UUID | str | None],
        exclude: UUID | None,
    ) -> None:
        try:
            emails = await self._resolve(recipients, exclude)
            self.dispatcher.notify(event_kind, {**payload, "recipients": emails})
        except Exception as e:
            logger.warning("Failed to build notification", event_kind=event_kind, error=str(e))

    async def _resolve(
        self, recipients: Iterable[UUID | str | None], exclude: UUID | None
    ) -> list[str]:
        emails: list[str] = []
        for recipient in recipients:
            if recipient is None or recipient == exclude:
                continue
            if recipient == MASTER_ADMINS:
                emails.extend(await self.user_repo.list_emails(UserRole.MASTER_ADMIN))
                continue
            user = await self.user_repo.get_by_id(UUID(str(recipient)))
            if user is not None:
                emails.append(user.email)
        return sorted(set(emails))
