"""User API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_user_service
from api.v1.schemas.common import ApiResponse
from api.v1.schemas.user import UserCreate, UserResponse, UserUpdate
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=ApiResponse[list[UserResponse]],
    summary="List active users",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_users(
    request: Request,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[list[UserResponse]]:
    """Active users ordered by full name (for assignee pickers)."""
    users = await service.list_active()
    return ApiResponse(data=[UserResponse.model_validate(u) for u in users])


@router.get(
    "/role/{role}",
    response_model=ApiResponse[list[UserResponse]],
    summary="List users by role",
    responses={400: {"description": "Unknown role"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_users_by_role(
    request: Request,
    role: str,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[list[UserResponse]]:
    users = await service.list_by_role(role)
    return ApiResponse(data=[UserResponse.model_validate(u) for u in users])


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Get a user",
    responses={404: {"description": "User not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_user(
    request: Request,
    user_id: int,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    found = await service.get_by_id(user_id)
    return ApiResponse(data=UserResponse.model_validate(found))


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    responses={
        400: {"description": "Invalid input or role"},
        409: {"description": "Username or email already exists"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_user(
    request: Request,
    body: UserCreate,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    created = await service.create(
        username=body.username,
        full_name=body.full_name,
        email=body.email,
        role=body.role,
    )
    return ApiResponse(
        message="User created successfully", data=UserResponse.model_validate(created)
    )


@router.put(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Update a user",
    responses={
        404: {"description": "User not found"},
        409: {"description": "Email already exists"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_user(
    request: Request,
    user_id: int,
    body: UserUpdate,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    updated = await service.update(
        user_id,
        full_name=body.full_name,
        email=body.email,
        role=body.role,
        is_active=body.is_active,
    )
    return ApiResponse(
        message="User updated successfully", data=UserResponse.model_validate(updated)
    )


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Deactivate a user",
    responses={404: {"description": "User not found"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def deactivate_user(
    request: Request,
    user_id: int,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    """Soft delete: the user keeps their tasks and activities."""
    updated = await service.deactivate(user_id)
    return ApiResponse(
        message="User deactivated successfully", data=UserResponse.model_validate(updated)
    )
