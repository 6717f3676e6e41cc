"""Fire-and-forget notification dispatch.

``notify`` hands the event to a worker pool and returns immediately. Delivery
failures are logged on the worker and never reach the caller.
"""

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from typing import Any

from src.app.core.config import get_settings
from src.app.core.logging import get_logger
from src.app.core.notifications.email import send_notification_email

logger = get_logger(__name__)

NotificationSender = Callable[[str, dict[str, Any]], None]


class NotificationDispatcher:
    """Enqueue-and-return handoff to a bounded thread pool."""

    def __init__(
        self,
        sender: NotificationSender = send_notification_email,
        max_workers: int = 4,
    ) -> None:
        self._sender = sender
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notification"
        )

    def notify(self, event_kind: str, payload: dict[str, Any]) -> Future[None] | None:
        """Schedule delivery of ``event_kind``. Never raises.

        Returns the scheduled future (useful in tests), or None if scheduling failed.
        """
        try:
            future = self._executor.submit(self._sender, event_kind, dict(payload))
        except Exception:
            logger.exception("Failed to schedule notification", event_kind=event_kind)
            return None
        future.add_done_callback(lambda f: self._log_outcome(event_kind, f))
        return future

    @staticmethod
    def _log_outcome(event_kind: str, future: Future[None]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.warning(
                "Notification delivery failed",
                event_kind=event_kind,
                error=str(exc),
                error_type=type(exc).__name__,
            )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


@lru_cache
def get_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(max_workers=get_settings().notification_workers)
