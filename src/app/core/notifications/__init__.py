"""Notification utilities - dispatcher and e-mail sender."""

from src.app.core.notifications.dispatcher import (
    NotificationDispatcher,
    NotificationSender,
    get_dispatcher,
)
from src.app.core.notifications.email import render_notification, send_notification_email

__all__ = [
    "NotificationDispatcher",
    "NotificationSender",
    "get_dispatcher",
    "render_notification",
    "send_notification_email",
]
