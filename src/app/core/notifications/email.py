"""Email client using Resend API."""

import html
from typing import Any

import resend

from src.app.core.config import get_settings
from src.app.core.logging import get_logger

logger = get_logger(__name__)

# Shared email styles
_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_MUTED_STYLE = "color: #666; font-size: 14px;"

# event kind -> (subject, body, link path). Placeholders are filled from the payload.
_TEMPLATES: dict[str, tuple[str, str, str]] = {
    "project.submitted": (
        "New project submitted: {project_title}",
        "A new project, <strong>{project_title}</strong>, is waiting to be assigned.",
        "/projects/{project_id}",
    ),
    "project.assigned": (
        "You've been assigned: {project_title}",
        "You've been assigned to <strong>{project_title}</strong>. "
        "Review the request and send a proposal.",
        "/projects/{project_id}",
    ),
    "proposal.created": (
        "New proposal for {project_title}",
        "You have a new proposal for <strong>{project_title}</strong>. "
        "Review it to get work started.",
        "/projects/{project_id}",
    ),
    "proposal.accepted": (
        "Proposal accepted: {project_title}",
        "Your proposal for <strong>{project_title}</strong> was accepted.",
        "/projects/{project_id}",
    ),
    "proposal.rejected": (
        "Proposal declined: {project_title}",
        "Your proposal for <strong>{project_title}</strong> was declined. "
        "You can send a revised proposal.",
        "/projects/{project_id}",
    ),
    "project.started": (
        "Work has started on {project_title}",
        "Work on <strong>{project_title}</strong> is now in progress.",
        "/projects/{project_id}",
    ),
    "project.completed": (
        "Project completed: {project_title}",
        "<strong>{project_title}</strong> has been marked complete.",
        "/projects/{project_id}",
    ),
    "project.cancelled": (
        "Project cancelled: {project_title}",
        "<strong>{project_title}</strong> has been cancelled.",
        "/projects/{project_id}",
    ),
    "invoice.created": (
        "New invoice for {project_title}",
        "An invoice for <strong>{amount}</strong> is ready for "
        "<strong>{project_title}</strong>.",
        "/invoices/{invoice_id}",
    ),
    "invoice.paid": (
        "Payment received for {project_title}",
        "Thanks! Your payment of <strong>{amount}</strong> was received.",
        "/invoices/{invoice_id}",
    ),
    "invoice.settled": (
        "Invoice paid for {project_title}",
        "The client paid an invoice for <strong>{project_title}</strong>.",
        "/projects/{project_id}",
    ),
    "invoice.payment_failed": (
        "Payment failed for {project_title}",
        "Your payment of <strong>{amount}</strong> didn't go through. "
        "Please try again with different payment details.",
        "/invoices/{invoice_id}",
    ),
    "message.posted": (
        "New message on {project_title}",
        "{sender_name} sent a message on <strong>{project_title}</strong>.",
        "/projects/{project_id}/messages",
    ),
    "interest.requested": (
        "An admin wants to take on {project_title}",
        "An admin asked to be assigned to <strong>{project_title}</strong>.",
        "/admin/interest-requests",
    ),
    "interest.declined": (
        "Request declined: {project_title}",
        "Your request to take on <strong>{project_title}</strong> was declined.",
        "/admin/browse-projects",
    ),
    "rating.received": (
        "New rating for {project_title}",
        "The client rated your work on <strong>{project_title}</strong> {stars} out of 5.",
        "/projects/{project_id}",
    ),
    "admin.invited": (
        "You're invited to join {app_name} as an admin",
        "{inviter_name} invited you to join <strong>{app_name}</strong> as a software admin.",
        "/signup/admin/{token}",
    ),
}


class _SafeDict(dict[str, str]):
    def __missing__(self, key: str) -> str:
        return ""


def render_notification(event_kind: str, payload: dict[str, Any]) -> tuple[str, str] | None:
    """Render (subject, html) for an event kind, or None if the kind has no template."""
    template = _TEMPLATES.get(event_kind)
    if template is None:
        return None

    settings = get_settings()
    subject_tpl, body_tpl, path_tpl = template
    raw = {"app_name": settings.app_name, **{k: str(v) for k, v in payload.items()}}
    escaped = _SafeDict({k: html.escape(v) for k, v in raw.items()})

    subject = subject_tpl.format_map(_SafeDict(raw))
    url = f"{settings.app_url}{path_tpl.format_map(escaped)}"
    body = body_tpl.format_map(escaped)

    return subject, f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <p>{body}</p>
    <p style="margin: 32px 0;">
        <a href="{url}" style="{_BUTTON_STYLE}">Open {html.escape(settings.app_name)}</a>
    </p>
    <p style="{_MUTED_STYLE}">
        You're receiving this because you take part in this project.
    </p>
</body>
</html>"""


def send_notification_email(event_kind: str, payload: dict[str, Any]) -> None:
    """Deliver the e-mail for one notification event.

    Runs on a dispatcher worker thread. Errors propagate to the dispatcher, which
    logs them.
    """
    recipients = [r for r in payload.get("recipients", []) if r]
    if not recipients:
        logger.debug("Notification has no recipients", event_kind=event_kind)
        return

    rendered = render_notification(
        event_kind, {k: v for k, v in payload.items() if k != "recipients"}
    )
    if rendered is None:
        logger.warning("No e-mail template for notification", event_kind=event_kind)
        return
    subject, body = rendered

    settings = get_settings()
    if not settings.resend_api_key:
        # Dev mode: log instead of sending
        logger.warning(
            "RESEND_API_KEY not set - email not sent",
            to=recipients,
            event_kind=event_kind,
        )
        return

    resend.api_key = settings.resend_api_key
    resend.Emails.send(
        {
            "from": settings.email_from,
            "to": recipients,
            "subject": subject,
            "html": body,
        }
    )
    logger.info("Notification email sent", event_kind=event_kind, recipients=len(recipients))
