"""Time entry and invoice endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.app.api.dependencies import BillingServiceDep, CurrentSession
from src.app.schemas.billing import (
    InvoiceCreateResult,
    InvoiceRead,
    TimeEntryCreate,
    TimeEntryRead,
)
from src.app.schemas.pagination import PaginatedResponse

router = APIRouter(tags=["billing"])


@router.post(
    "/projects/{project_id}/time-entries",
    response_model=TimeEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log time",
    responses={409: {"description": "Project is not in progress"}},
)
async def log_time(
    project_id: UUID, data: TimeEntryCreate, session: CurrentSession, service: BillingServiceDep
) -> TimeEntryRead:
    entry = await service.log_time(session, project_id, data)
    return TimeEntryRead.model_validate(entry)


@router.get(
    "/projects/{project_id}/time-entries",
    response_model=PaginatedResponse[TimeEntryRead],
    summary="List time entries",
)
async def list_time_entries(
    project_id: UUID,
    session: CurrentSession,
    service: BillingServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=200, description="Max items to return")] = 100,
) -> PaginatedResponse[TimeEntryRead]:
    entries, next_cursor, has_more = await service.list_time_entries(
        session, project_id, cursor=cursor, limit=limit
    )
    return PaginatedResponse(
        items=[TimeEntryRead.model_validate(e) for e in entries],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.post(
    "/projects/{project_id}/invoices",
    response_model=InvoiceCreateResult,
    summary="Invoice unbilled hours",
    description=(
        "Hourly projects only. Bills every time entry not yet on an invoice. "
        "Returns invoice=null when nothing is unbilled."
    ),
    responses={
        409: {"description": "Project is not in progress"},
        422: {"description": "Flat-fee projects are invoiced at completion"},
    },
)
async def create_invoice(
    project_id: UUID, session: CurrentSession, service: BillingServiceDep
) -> InvoiceCreateResult:
    invoice = await service.create_invoice(session, project_id)
    if invoice is None:
        return InvoiceCreateResult(invoice=None, created=False)
    return InvoiceCreateResult(
        invoice=InvoiceRead.for_viewer(invoice, session.can_view_pricing), created=True
    )


@router.get(
    "/projects/{project_id}/invoices",
    response_model=list[InvoiceRead],
    summary="List invoices",
)
async def list_invoices(
    project_id: UUID, session: CurrentSession, service: BillingServiceDep
) -> list[InvoiceRead]:
    invoices, decision = await service.list_invoices(session, project_id)
    return [InvoiceRead.for_viewer(i, decision.can_view_pricing) for i in invoices]


@router.get("/invoices/{invoice_id}", response_model=InvoiceRead, summary="Get invoice")
async def get_invoice(
    invoice_id: UUID, session: CurrentSession, service: BillingServiceDep
) -> InvoiceRead:
    invoice, decision = await service.get_invoice(session, invoice_id)
    return InvoiceRead.for_viewer(invoice, decision.can_view_pricing)
