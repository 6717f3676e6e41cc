"""Tests for notification dispatch and e-mail rendering."""

import threading
from unittest.mock import MagicMock, patch

import pytest

from src.app.core.config import get_settings
from src.app.core.notifications import (
    NotificationDispatcher,
    render_notification,
    send_notification_email,
)

pytestmark = pytest.mark.unit


class TestDispatcher:
    def test_notify_returns_before_delivery_finishes(self):
        release = threading.Event()
        delivered: list[str] = []

        def slow_sender(kind, payload):
            release.wait(timeout=5)
            delivered.append(kind)

        dispatcher = NotificationDispatcher(sender=slow_sender, max_workers=1)
        future = dispatcher.notify("project.submitted", {"project_title": "Fix login"})

        assert future is not None
        assert delivered == []
        release.set()
        dispatcher.shutdown(wait=True)
        assert delivered == ["project.submitted"]

    def test_sender_failure_is_logged_not_raised(self, capturing_logger):
        def broken_sender(kind, payload):
            raise ConnectionError("smtp down")

        dispatcher = NotificationDispatcher(sender=broken_sender, max_workers=1)
        dispatcher.notify("invoice.created", {"amount": "650.00"})
        dispatcher.shutdown(wait=True)

        warnings = [c for c in capturing_logger.calls if c.method_name == "warning"]
        assert len(warnings) == 1
        assert warnings[0].kwargs["event"] == "Notification delivery failed"
        assert warnings[0].kwargs["event_kind"] == "invoice.created"
        assert warnings[0].kwargs["error_type"] == "ConnectionError"

    def test_payload_is_copied_before_handoff(self):
        seen: list[dict] = []
        dispatcher = NotificationDispatcher(sender=lambda k, p: seen.append(p), max_workers=1)

        payload = {"project_title": "Original"}
        dispatcher.notify("project.started", payload)
        payload["project_title"] = "Mutated"
        dispatcher.shutdown(wait=True)

        assert seen[0]["project_title"] == "Original"

    def test_notify_after_shutdown_does_not_raise(self):
        dispatcher = NotificationDispatcher(sender=MagicMock(), max_workers=1)
        dispatcher.shutdown(wait=True)

        assert dispatcher.notify("project.cancelled", {}) is None


class TestRenderNotification:
    def test_unknown_kind(self):
        assert render_notification("no.such.event", {}) is None

    def test_subject_and_link(self):
        subject, body = render_notification(
            "invoice.created",
            {"project_title": "Fix login", "amount": "650.00", "invoice_id": "inv-1"},
        )

        assert subject == "New invoice for Fix login"
        assert "650.00" in body
        assert f"{get_settings().app_url}/invoices/inv-1" in body

    def test_payload_values_are_html_escaped(self):
        _, body = render_notification(
            "message.posted",
            {"project_title": "<script>alert(1)</script>", "sender_name": "Eve & co"},
        )

        assert "<script>" not in body
        assert "&lt;script&gt;" in body
        assert "Eve &amp; co" in body

    def test_settled_invoice_notice_has_no_amount_slot(self):
        _, body = render_notification(
            "invoice.settled",
            {"project_title": "Fix login", "amount": "650.00", "project_id": "p-1"},
        )

        assert "650.00" not in body
        assert f"{get_settings().app_url}/projects/p-1" in body

    def test_rating_notice_shows_stars(self):
        subject, body = render_notification(
            "rating.received", {"project_title": "Fix login", "stars": 4}
        )

        assert subject == "New rating for Fix login"
        assert "4 out of 5" in body

    def test_missing_placeholders_render_empty(self):
        subject, _ = render_notification("project.assigned", {})
        assert subject == "You've been assigned: "


class TestSendNotificationEmail:
    def test_without_api_key_only_logs(self, capturing_logger):
        with patch("src.app.core.notifications.email.resend") as mock_resend:
            send_notification_email(
                "project.completed",
                {"recipients": ["client@example.com"], "project_title": "Fix login"},
            )

        mock_resend.Emails.send.assert_not_called()
        events = [c.kwargs["event"] for c in capturing_logger.calls]
        assert "RESEND_API_KEY not set - email not sent" in events

    def test_sends_through_resend_when_configured(self, monkeypatch):
        settings = get_settings().model_copy(update={"resend_api_key": "re_test"})
        monkeypatch.setattr("src.app.core.notifications.email.get_settings", lambda: settings)

        with patch("src.app.core.notifications.email.resend") as mock_resend:
            send_notification_email(
                "proposal.created",
                {
                    "recipients": ["client@example.com", None],
                    "project_title": "Fix login",
                    "project_id": "p-1",
                },
            )

        mock_resend.Emails.send.assert_called_once()
        message = mock_resend.Emails.send.call_args[0][0]
        assert message["to"] == ["client@example.com"]
        assert message["subject"] == "New proposal for Fix login"
        assert message["from"] == settings.email_from

    def test_no_recipients_skips_delivery(self):
        with patch("src.app.core.notifications.email.resend") as mock_resend:
            send_notification_email("project.started", {"recipients": []})

        mock_resend.Emails.send.assert_not_called()
