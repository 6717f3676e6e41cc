"""The Alembic history builds the same schema as the models."""

from collections.abc import Generator
from pathlib import Path

import pytest
from alembic.config import Config
from sqlalchemy import BigInteger, create_engine, inspect
from sqlmodel import SQLModel

from alembic import command
from src.app import models  # noqa: F401
from src.app.core.config import get_settings
from src.app.core.db import run_migrations_sync
from src.app.core.db.migrations import run_migrations_async

pytestmark = pytest.mark.integration


@pytest.fixture
def database_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path]:
    path = tmp_path / "migrated.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


def _tables(path: Path) -> set[str]:
    engine = create_engine(f"sqlite:///{path}")
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_upgrade_creates_every_model_table(database_file):
    run_migrations_sync()

    assert _tables(database_file) == set(SQLModel.metadata.tables) | {"alembic_version"}


def test_one_pending_proposal_index_is_partial_and_unique(database_file):
    run_migrations_sync()

    engine = create_engine(f"sqlite:///{database_file}")
    try:
        indexes = {ix["name"]: ix for ix in inspect(engine).get_indexes("proposals")}
    finally:
        engine.dispose()
    index = indexes["uq_proposals_one_pending_per_project"]
    assert index["unique"]
    assert index["column_names"] == ["project_id"]


MONEY_COLUMNS = [
    ("projects", "budget"),
    ("proposals", "hourly_rate"),
    ("proposals", "fix_fee"),
    ("invoices", "amount"),
    ("subscription_packages", "monthly_price"),
]


@pytest.mark.parametrize(("table", "column"), MONEY_COLUMNS)
def test_money_columns_are_64_bit(database_file, table, column):
    run_migrations_sync()

    engine = create_engine(f"sqlite:///{database_file}")
    try:
        columns = {c["name"]: c for c in inspect(engine).get_columns(table)}
    finally:
        engine.dispose()
    assert isinstance(columns[column]["type"], BigInteger)
    assert isinstance(SQLModel.metadata.tables[table].c[column].type, BigInteger)


def test_downgrade_removes_everything(database_file):
    run_migrations_sync()
    command.downgrade(Config("alembic.ini"), "base")

    assert _tables(database_file) == {"alembic_version"}


async def test_async_runner(database_file):
    await run_migrations_async()

    assert "projects" in _tables(database_file)
