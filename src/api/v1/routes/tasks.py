"""Task API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_task_service
from api.v1.schemas.common import ApiResponse
from api.v1.schemas.task import TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.task import TaskView
from domain.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get(
    "",
    response_model=ApiResponse[list[TaskResponse]],
    summary="List all tasks",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_tasks(
    request: Request,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[list[TaskResponse]]:
    """Get every active task, newest first."""
    tasks = await service.get_all()
    return ApiResponse(data=_to_responses(tasks))


@router.get(
    "/user/{user_id}",
    response_model=ApiResponse[list[TaskResponse]],
    summary="List a user's tasks",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_tasks_for_user(
    request: Request,
    user_id: int,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[list[TaskResponse]]:
    """Tasks assigned to a user: soonest due first, then most urgent."""
    tasks = await service.get_by_user(user_id)
    return ApiResponse(data=_to_responses(tasks))


@router.get(
    "/status/{task_status}",
    response_model=ApiResponse[list[TaskResponse]],
    summary="List tasks by status",
    responses={400: {"description": "Unknown status"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_tasks_by_status(
    request: Request,
    task_status: str,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[list[TaskResponse]]:
    """Tasks in one of Pending, InProgress, Completed, OnHold."""
    tasks = await service.get_by_status(task_status)
    return ApiResponse(data=_to_responses(tasks))


@router.get(
    "/{task_id}",
    response_model=ApiResponse[TaskResponse],
    summary="Get a task",
    responses={404: {"description": "Task not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_task(
    request: Request,
    task_id: int,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    task = await service.get_by_id(task_id)
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.post(
    "",
    response_model=ApiResponse[TaskResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
    responses={
        400: {"description": "Invalid input, unknown reference or enum value"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_task(
    request: Request,
    body: TaskCreate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    """
    Create a task in Pending status.

    Connected observers receive `taskCreated` with the new task.
    """
    task = await service.create(
        actor_id=user.id,
        title=body.title,
        activity_id=body.activity_id,
        description=body.description,
        assigned_to_user_id=body.assigned_to_user_id,
        priority=body.priority,
        due_date=body.due_date,
    )
    return ApiResponse(message="Task created successfully", data=TaskResponse.model_validate(task))


@router.put(
    "/{task_id}",
    response_model=ApiResponse[TaskResponse],
    summary="Update a task",
    responses={
        400: {"description": "Invalid input, unknown reference or enum value"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_task(
    request: Request,
    task_id: int,
    body: TaskUpdate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    """
    Update a task. All fields are optional (partial update).

    Connected observers receive `taskUpdated`.
    """
    # Nullable fields are only passed when explicitly present in the request
    fields_set = body.model_fields_set
    task = await service.update(
        task_id=task_id,
        actor_id=user.id,
        title=body.title,
        description=body.description,
        activity_id=body.activity_id,
        assigned_to_user_id=(
            body.assigned_to_user_id if "assigned_to_user_id" in fields_set else ...
        ),
        status=body.status,
        priority=body.priority,
        due_date=body.due_date if "due_date" in fields_set else ...,
    )
    return ApiResponse(message="Task updated successfully", data=TaskResponse.model_validate(task))


@router.put(
    "/{task_id}/status",
    response_model=ApiResponse[TaskResponse],
    summary="Change a task's status",
    responses={
        400: {"description": "Unknown status"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_task_status(
    request: Request,
    task_id: int,
    body: TaskStatusUpdate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    """Connected observers receive `taskStatusChanged(task_id, status, task)`."""
    task = await service.update_status(task_id, body.status, actor_id=user.id)
    return ApiResponse(message="Task status updated", data=TaskResponse.model_validate(task))


@router.post(
    "/{task_id}/assign/{user_id}",
    response_model=ApiResponse[TaskResponse],
    summary="Assign a task",
    responses={
        400: {"description": "Unknown or inactive user"},
        404: {"description": "Task not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def assign_task(
    request: Request,
    task_id: int,
    user_id: int,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    """Connected observers receive `taskAssigned(task, user_id)`."""
    task = await service.assign(task_id, user_id, actor_id=user.id)
    return ApiResponse(message="Task assigned successfully", data=TaskResponse.model_validate(task))


@router.delete(
    "/{task_id}/assign",
    response_model=ApiResponse[TaskResponse],
    summary="Unassign a task",
    responses={404: {"description": "Task not found"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def unassign_task(
    request: Request,
    task_id: int,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[TaskResponse]:
    """Connected observers receive `taskAssigned(task, null)`."""
    task = await service.assign(task_id, None, actor_id=user.id)
    return ApiResponse(message="Task unassigned", data=TaskResponse.model_validate(task))


@router.delete(
    "/{task_id}",
    response_model=ApiResponse[None],
    summary="Delete a task",
    responses={404: {"description": "Task not found"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_task(
    request: Request,
    task_id: int,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> ApiResponse[None]:
    """Soft-delete a task. Connected observers receive `taskDeleted(task_id)`."""
    await service.delete(task_id, actor_id=user.id)
    return ApiResponse(message="Task deleted successfully")


def _to_responses(tasks: list[TaskView]) -> list[TaskResponse]:
    return [TaskResponse.model_validate(t) for t in tasks]
