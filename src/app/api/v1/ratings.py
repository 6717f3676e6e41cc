"""Rating endpoints - client reviews of delivered work and their moderation."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.app.api.dependencies import CurrentSession, RatingServiceDep
from src.app.schemas.pagination import PaginatedResponse
from src.app.schemas.rating import AdminRatingSummary, RatingCreate, RatingRead
from src.app.schemas.user import AdminSummary

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post(
    "",
    response_model=RatingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Rate a completed project",
    description="The project's client only, once per project, 1 to 5 stars.",
    responses={
        403: {"description": "Not your project"},
        404: {"description": "Project not found"},
        409: {"description": "Not completed yet, or already rated"},
    },
)
async def create_rating(
    data: RatingCreate, session: CurrentSession, service: RatingServiceDep
) -> RatingRead:
    rating = await service.rate(session, data)
    return RatingRead.model_validate(rating)


@router.get("", response_model=PaginatedResponse[RatingRead], summary="List ratings")
async def list_ratings(
    session: CurrentSession,
    service: RatingServiceDep,
    admin_id: Annotated[UUID | None, Query(description="Master admins: one admin only")] = None,
    cursor: Annotated[str | None, Query(description="Cursor for pagination")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 50,
) -> PaginatedResponse[RatingRead]:
    ratings, next_cursor, has_more = await service.list_ratings(session, admin_id, cursor, limit)
    return PaginatedResponse(
        items=[RatingRead.model_validate(r) for r in ratings],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get(
    "/admins",
    response_model=list[AdminRatingSummary],
    summary="Average rating per admin",
    description="Master admin only. Hidden ratings are not counted.",
)
async def list_admin_rating_summaries(
    session: CurrentSession, service: RatingServiceDep
) -> list[AdminRatingSummary]:
    return [
        AdminRatingSummary(
            admin=AdminSummary.model_validate(s["admin"]),
            ratings=s["ratings"],
            average_stars=s["average_stars"],
        )
        for s in await service.admin_summaries(session)
    ]


@router.post(
    "/{rating_id}/hide",
    response_model=RatingRead,
    summary="Hide a rating",
    description="Master admin only. The rating is kept but no longer shown or averaged.",
    responses={404: {"description": "Rating not found"}, 409: {"description": "Already hidden"}},
)
async def hide_rating(
    rating_id: UUID, session: CurrentSession, service: RatingServiceDep
) -> RatingRead:
    rating = await service.hide(session, rating_id)
    return RatingRead.model_validate(rating)
