"""Integration test fixtures for database and HTTP client operations.

Each test gets its own throw-away SQLite database with the full schema.
Uses polyfactory for type-safe test data generation.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlmodel import SQLModel

from src.app import models  # noqa: F401
from src.app.core import db
from src.app.core.health import reset_health_cache
from src.app.core.notifications import get_dispatcher
from src.app.core.payments import get_payment_gateway
from src.app.main import create_app
from src.app.models import User
from tests.factories import UserFactory
from tests.helpers import FakePaymentGateway, RecordingDispatcher


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Fresh database file per test, schema created from the models."""
    await db.dispose_engine()
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'flowfix.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    db.set_engine(test_engine)
    reset_health_cache()
    yield test_engine

    db.set_engine(None)
    reset_health_cache()
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for database operations.

    The session does NOT auto-commit; tests must call ``await session.commit()``.
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
async def client(
    engine: AsyncEngine, dispatcher: RecordingDispatcher, gateway: FakePaymentGateway
) -> AsyncGenerator[AsyncClient]:
    """HTTP client over the ASGI app with notifications recorded and payments faked."""
    app = create_app()
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Persist a user built by ``UserFactory.<variant>``."""

    async def _make(variant: str = "client", **kwargs: Any) -> User:
        user = getattr(UserFactory, variant)(**kwargs)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
async def client_user(make_user) -> User:
    return await make_user("client")


@pytest.fixture
async def admin_user(make_user) -> User:
    return await make_user("software_admin")


@pytest.fixture
async def master_user(make_user) -> User:
    return await make_user("master_admin")
