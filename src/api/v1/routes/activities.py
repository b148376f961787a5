"""Activity API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_activity_service
from api.v1.schemas.activity import (
    ActivityCreate,
    ActivityDeleteResult,
    ActivityResponse,
    ActivityUpdate,
)
from api.v1.schemas.common import ApiResponse
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.activity import ActivityDeletion
from domain.services.activity_service import ActivityService

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get(
    "",
    response_model=ApiResponse[list[ActivityResponse]],
    summary="List active activities",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_activities(
    request: Request,
    user: CurrentUser,
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[list[ActivityResponse]]:
    """Active activities by name, with creator name and task count."""
    activities = await service.list_active()
    return ApiResponse(data=[ActivityResponse.model_validate(a) for a in activities])


@router.get(
    "/{activity_id}",
    response_model=ApiResponse[ActivityResponse],
    summary="Get an activity",
    responses={404: {"description": "Activity not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_activity(
    request: Request,
    activity_id: int,
    user: CurrentUser,
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityResponse]:
    activity = await service.get_by_id(activity_id)
    return ApiResponse(data=ActivityResponse.model_validate(activity))


@router.post(
    "",
    response_model=ApiResponse[ActivityResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create an activity",
    responses={400: {"description": "Invalid name or date range"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_activity(
    request: Request,
    body: ActivityCreate,
    user: CurrentUser,
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityResponse]:
    activity = await service.create(
        actor_id=user.id,
        name=body.name,
        description=body.description,
        start_date=body.start_date,
        end_date=body.end_date,
    )
    return ApiResponse(
        message="Activity created successfully",
        data=ActivityResponse.model_validate(activity),
    )


@router.put(
    "/{activity_id}",
    response_model=ApiResponse[ActivityResponse],
    summary="Update an activity",
    responses={
        400: {"description": "Invalid name or date range"},
        404: {"description": "Activity not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_activity(
    request: Request,
    activity_id: int,
    body: ActivityUpdate,
    user: CurrentUser,
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityResponse]:
    """Partial update. Send a date as `null` to clear it."""
    fields_set = body.model_fields_set
    activity = await service.update(
        activity_id,
        name=body.name,
        description=body.description,
        start_date=body.start_date if "start_date" in fields_set else ...,
        end_date=body.end_date if "end_date" in fields_set else ...,
        is_active=body.is_active,
    )
    return ApiResponse(
        message="Activity updated successfully",
        data=ActivityResponse.model_validate(activity),
    )


@router.delete(
    "/{activity_id}",
    response_model=ApiResponse[ActivityDeleteResult],
    summary="Delete an activity",
    responses={404: {"description": "Activity not found"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_activity(
    request: Request,
    activity_id: int,
    user: CurrentUser,
    service: ActivityService = Depends(get_activity_service),
) -> ApiResponse[ActivityDeleteResult]:
    """
    Delete an activity.

    An activity that still has tasks is archived (`is_active=false`) so the
    tasks keep a valid reference; an empty one is removed.
    """
    outcome = await service.delete(activity_id)
    message = (
        "Activity archived (has tasks)"
        if outcome is ActivityDeletion.ARCHIVED
        else "Activity deleted successfully"
    )
    return ApiResponse(
        message=message, data=ActivityDeleteResult(id=activity_id, outcome=outcome)
    )
