"""User registry endpoints."""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import Page, get_create_user_use_case, get_page, get_uow
from src.application.dto.mappers import user_to_response
from src.application.dto.requests import CreateUserRequest
from src.application.dto.responses import ErrorResponse, UserListResponse, UserResponse
from src.application.use_cases.create_user import CreateUserUseCase
from src.core.entities.user import UserRole
from src.core.exceptions import UserNotFoundError
from src.core.interfaces import UnitOfWorkFactory

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_user(
    request: CreateUserRequest,
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
) -> UserResponse:
    """Register a user."""
    user = await use_case.execute(request)
    return use_case.to_response(user)


@router.get("", response_model=UserListResponse)
async def list_users(
    role: UserRole | None = None,
    active_only: bool = False,
    page: Page = Depends(get_page),
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> UserListResponse:
    """List users, optionally filtered by role and active flag."""
    async with uow_factory() as uow:
        users = await uow.users.list_users(
            role=role, active_only=active_only, limit=page.limit, offset=page.offset
        )
    return UserListResponse(items=[user_to_response(u) for u in users], total=len(users))


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_user(
    user_id: int,
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> UserResponse:
    """Get a user by ID."""
    async with uow_factory() as uow:
        user = await uow.users.get(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user_to_response(user)
