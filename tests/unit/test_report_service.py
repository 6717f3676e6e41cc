"""Unit tests for ReportService."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.app.core.exceptions import Forbidden
from src.app.models import ProjectStatus, UserRole
from src.app.services.authorization import Session
from src.app.services.report_service import ReportService

pytestmark = pytest.mark.unit


@pytest.fixture
def repos() -> tuple[MagicMock, MagicMock, MagicMock]:
    project_repo = MagicMock()
    project_repo.count_by_status = AsyncMock(return_value={"completed": 2, "in_progress": 1})
    invoice_repo = MagicMock()
    invoice_repo.totals_by_status = AsyncMock(
        return_value={"paid": (1, 50_000), "pending": (2, 30_000), "failed": (1, 5_000)}
    )
    time_entry_repo = MagicMock()
    time_entry_repo.sum_hours = AsyncMock(return_value=Decimal("3.25"))
    return project_repo, invoice_repo, time_entry_repo


@pytest.fixture
def report_service(repos) -> ReportService:
    return ReportService(*repos)


async def test_master_totals_are_platform_wide(report_service, repos):
    project_repo, invoice_repo, _ = repos
    master = Session(user_id=uuid4(), role=UserRole.MASTER_ADMIN)

    report = await report_service.summary(master)

    project_repo.count_by_status.assert_awaited_once_with(None, None)
    invoice_repo.totals_by_status.assert_awaited_once_with(None, None)
    assert report["scope"] == "all"
    assert set(report["projects_by_status"]) == {s.value for s in ProjectStatus}
    assert report["projects_by_status"]["submitted"] == 0
    assert report["total_projects"] == 3
    assert report["active_projects"] == 1
    assert report["revenue"] == 50_000
    assert report["invoices_outstanding"] == 3
    assert report["outstanding_amount"] == 35_000


async def test_software_admin_totals_are_scoped(report_service, repos):
    _, _, time_entry_repo = repos
    admin = Session(user_id=uuid4(), role=UserRole.SOFTWARE_ADMIN)

    report = await report_service.summary(admin)

    time_entry_repo.sum_hours.assert_awaited_once_with(admin.user_id, None)
    assert report["scope"] == "assigned"


async def test_aware_since_is_compared_as_naive_utc(report_service, repos):
    project_repo, _, _ = repos
    master = Session(user_id=uuid4(), role=UserRole.MASTER_ADMIN)
    since = datetime(2026, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

    report = await report_service.summary(master, since)

    assert report["since"] == datetime(2026, 3, 1, 10, 0)
    project_repo.count_by_status.assert_awaited_once_with(None, datetime(2026, 3, 1, 10, 0))


async def test_clients_are_refused(report_service):
    with pytest.raises(Forbidden):
        await report_service.summary(Session(user_id=uuid4(), role=UserRole.CLIENT))
