"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_TOKEN_SECRET", "test-session-secret-0123456789abcdef0123")
# Payment processing stays unconfigured unless a test opts in
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ.pop("STRIPE_WEBHOOK_SECRET", None)
os.environ.pop("RESEND_API_KEY", None)

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import Generator

import pytest
import structlog
from structlog.testing import CapturingLogger

from src.app.core.config import get_settings
from src.app.core.logging import clear_request_context
from src.app.core.notifications import get_dispatcher
from src.app.core.payments import get_payment_gateway
from tests.helpers import RecordingDispatcher

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()
get_payment_gateway.cache_clear()
get_dispatcher.cache_clear()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def capturing_logger() -> Generator[CapturingLogger]:
    """Route structlog output into a CapturingLogger for the duration of a test."""
    cap_logger = CapturingLogger()
    old_config = structlog.get_config()

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=lambda *args, **kwargs: cap_logger,
        cache_logger_on_first_use=False,
    )

    clear_request_context()
    yield cap_logger
    clear_request_context()
    structlog.configure(**old_config)
