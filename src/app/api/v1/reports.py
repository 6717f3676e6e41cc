"""Reporting endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query

from src.app.api.dependencies import CurrentSession, ReportServiceDep
from src.app.schemas.report import ReportSummary

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get(
    "/summary",
    response_model=ReportSummary,
    summary="Project and revenue totals",
    description=(
        "Master admins get platform totals including revenue. Software admins get totals "
        "for their own assignments, without monetary figures."
    ),
)
async def get_report_summary(
    session: CurrentSession,
    service: ReportServiceDep,
    since: Annotated[datetime | None, Query(description="Only count activity after this")] = None,
) -> ReportSummary:
    data = await service.summary(session, since)
    return ReportSummary.for_viewer(data, session.can_view_pricing)
