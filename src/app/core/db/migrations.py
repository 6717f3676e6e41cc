"""Alembic migration runner for deployment scripts and tests."""

import asyncio

from alembic.config import Config

from alembic import command


def run_migrations_sync(revision: str = "head") -> None:
    """Upgrade the database to ``revision`` using the repository's alembic.ini."""
    alembic_cfg = Config("alembic.ini")
    command.upgrade(alembic_cfg, revision)


async def run_migrations_async(revision: str = "head") -> None:
    """Run migrations from async context without blocking the event loop."""
    await asyncio.to_thread(run_migrations_sync, revision)
