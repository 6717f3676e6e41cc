"""Project endpoints - intake and lifecycle transitions."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.app.api.dependencies import CurrentSession, ProjectServiceDep
from src.app.models import ProjectStatus
from src.app.schemas.billing import InvoiceRead
from src.app.schemas.pagination import PaginatedResponse
from src.app.schemas.project import ProjectAssign, ProjectCreate, ProjectRead
from src.app.schemas.proposal import ProposalCreate, ProposalRead

router = APIRouter(prefix="/projects", tags=["projects"])

_TRANSITION_RESPONSES: dict[int | str, dict[str, str]] = {
    403: {"description": "Not allowed for this project"},
    404: {"description": "Project not found"},
    409: {"description": "Transition not possible from the current status"},
}


class ProjectCompleted(ProjectRead):
    """Completed project plus the final invoice, if one was due."""

    final_invoice: InvoiceRead | None = None


@router.get("", response_model=PaginatedResponse[ProjectRead], summary="List projects")
async def list_projects(
    session: CurrentSession,
    service: ProjectServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 50,
    status_filter: Annotated[ProjectStatus | None, Query(alias="status")] = None,
) -> PaginatedResponse[ProjectRead]:
    """Own projects for clients, assigned projects for admins, everything for master admins."""
    projects, next_cursor, has_more = await service.list_projects(
        session, cursor=cursor, limit=limit, status=status_filter
    )
    return PaginatedResponse(
        items=[ProjectRead.for_viewer(p, session.can_view_pricing) for p in projects],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit project",
    responses={403: {"description": "Only clients submit projects"}},
)
async def create_project(
    data: ProjectCreate, session: CurrentSession, service: ProjectServiceDep
) -> ProjectRead:
    project = await service.create_project(session, data)
    return ProjectRead.model_validate(project)


@router.get(
    "/open",
    response_model=PaginatedResponse[ProjectRead],
    summary="Browse unassigned projects",
    description="Admins only. Submitted projects nobody has been assigned to yet.",
)
async def list_open_projects(
    session: CurrentSession,
    service: ProjectServiceDep,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 50,
) -> PaginatedResponse[ProjectRead]:
    projects, next_cursor, has_more = await service.list_open(session, cursor, limit)
    return PaginatedResponse(
        items=[ProjectRead.for_viewer(p, session.can_view_pricing) for p in projects],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Get project",
    responses={403: {"description": "Not your project"}, 404: {"description": "Not found"}},
)
async def get_project(
    project_id: UUID, session: CurrentSession, service: ProjectServiceDep
) -> ProjectRead:
    project, decision = await service.get_project(session, project_id)
    return ProjectRead.for_viewer(project, decision.can_view_pricing)


@router.post(
    "/{project_id}/assign",
    response_model=ProjectRead,
    summary="Assign admin",
    description="Master admin only. Moves a submitted project to assigned.",
    responses=_TRANSITION_RESPONSES,
)
async def assign_project(
    project_id: UUID, data: ProjectAssign, session: CurrentSession, service: ProjectServiceDep
) -> ProjectRead:
    project = await service.assign(session, project_id, data.admin_id)
    return ProjectRead.model_validate(project)


@router.post(
    "/{project_id}/start",
    response_model=ProjectRead,
    summary="Start work",
    responses=_TRANSITION_RESPONSES,
)
async def start_project(
    project_id: UUID, session: CurrentSession, service: ProjectServiceDep
) -> ProjectRead:
    project = await service.start(session, project_id)
    return ProjectRead.for_viewer(project, session.can_view_pricing)


@router.post(
    "/{project_id}/complete",
    response_model=ProjectCompleted,
    summary="Mark complete",
    description="Refused while invoices are unpaid. Creates the final invoice.",
    responses=_TRANSITION_RESPONSES,
)
async def complete_project(
    project_id: UUID, session: CurrentSession, service: ProjectServiceDep
) -> ProjectCompleted:
    project, invoice = await service.complete(session, project_id)
    can_view = session.can_view_pricing
    view = ProjectCompleted.for_viewer(project, can_view)
    return view.model_copy(
        update={"final_invoice": InvoiceRead.for_viewer(invoice, can_view) if invoice else None}
    )


@router.post(
    "/{project_id}/cancel",
    response_model=ProjectRead,
    summary="Cancel project",
    responses=_TRANSITION_RESPONSES,
)
async def cancel_project(
    project_id: UUID, session: CurrentSession, service: ProjectServiceDep
) -> ProjectRead:
    project = await service.cancel(session, project_id)
    return ProjectRead.for_viewer(project, session.can_view_pricing)


@router.get(
    "/{project_id}/proposals",
    response_model=list[ProposalRead],
    tags=["proposals"],
    summary="Proposal history",
    description="All proposals for the project, superseded ones included, newest first.",
)
async def list_proposals(
    project_id: UUID, session: CurrentSession, service: ProjectServiceDep
) -> list[ProposalRead]:
    proposals, decision = await service.list_proposals(session, project_id)
    return [ProposalRead.for_viewer(p, decision.can_view_pricing) for p in proposals]


@router.post(
    "/{project_id}/proposals",
    response_model=ProposalRead,
    status_code=status.HTTP_201_CREATED,
    tags=["proposals"],
    summary="Send proposal",
    responses={
        **_TRANSITION_RESPONSES,
        409: {"description": "A proposal is already pending, or the project isn't assigned"},
    },
)
async def create_proposal(
    project_id: UUID, data: ProposalCreate, session: CurrentSession, service: ProjectServiceDep
) -> ProposalRead:
    proposal = await service.create_proposal(session, project_id, data)
    return ProposalRead.for_viewer(proposal, session.can_view_pricing)
