from fastapi import APIRouter

from src.app.api.dependencies import CurrentSession, UserServiceDep
from src.app.schemas.user import AdminSummary, UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
async def get_me(session: CurrentSession, service: UserServiceDep) -> UserRead:
    user = await service.get_me(session)
    return UserRead.model_validate(user)


@router.get(
    "/admins",
    response_model=list[AdminSummary],
    responses={403: {"description": "Master admin only"}},
)
async def list_admins(session: CurrentSession, service: UserServiceDep) -> list[AdminSummary]:
    """Admins a project can be assigned to."""
    admins = await service.list_admins(session)
    return [AdminSummary.model_validate(a) for a in admins]
