"""Task lifecycle service: the single writer of task state."""

from collections.abc import Callable
from datetime import datetime
from typing import cast

import structlog

from core.exceptions import ReferenceNotFoundError, TaskNotFoundError
from domain.entities.hub import TaskEvents
from domain.entities.task import (
    UNASSIGNED,
    UNKNOWN_NAME,
    Task,
    TaskPriority,
    TaskStatus,
    TaskView,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.notification_hub import NotificationHub
from domain.services.validation import parse_enum, require_text

logger = structlog.get_logger()


class TaskService:
    """Service layer for the task lifecycle.

    Every successful mutation commits first, then pushes exactly one event
    with the post-mutation projection to the hub. Reads never broadcast.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork], hub: NotificationHub) -> None:
        self._uow_factory = uow_factory
        self._hub = hub

    # --- Reads ---

    async def get_all(self) -> list[TaskView]:
        """Get all active tasks, newest first."""
        async with self._uow_factory() as uow:
            tasks = await uow.tasks.get_all()
            return await self._project(uow, tasks)

    async def get_by_id(self, task_id: int) -> TaskView:
        """Get one active task."""
        async with self._uow_factory() as uow:
            task = await uow.tasks.get(task_id)
            if not task:
                raise TaskNotFoundError(task_id)
            return (await self._project(uow, [task]))[0]

    async def get_by_user(self, user_id: int) -> list[TaskView]:
        """Get a user's queue: soonest due first, then most urgent."""
        async with self._uow_factory() as uow:
            tasks = await uow.tasks.get_by_assignee(user_id)
            return await self._project(uow, tasks)

    async def get_by_status(self, status: TaskStatus | str) -> list[TaskView]:
        """Get tasks in one status, newest first."""
        task_status = parse_enum(TaskStatus, "status", status)
        async with self._uow_factory() as uow:
            tasks = await uow.tasks.get_by_status(task_status)
            return await self._project(uow, tasks)

    # --- Mutations ---

    async def create(
        self,
        actor_id: int,
        title: str,
        activity_id: int,
        description: str | None = None,
        assigned_to_user_id: int | None = None,
        priority: TaskPriority | str | None = None,
        due_date: datetime | None = None,
    ) -> TaskView:
        """Create a task in Pending status and announce it."""
        title = require_text("title", title)

        async with self._uow_factory() as uow:
            await self._require_activity(uow, activity_id)
            if assigned_to_user_id is not None:
                await self._require_user(uow, assigned_to_user_id)
            if not await uow.users.get(actor_id):
                raise ReferenceNotFoundError("user", actor_id)

            task_priority = (
                parse_enum(TaskPriority, "priority", priority)
                if priority is not None
                else TaskPriority.MEDIUM
            )

            task = Task(
                title=title,
                description=description,
                activity_id=activity_id,
                assigned_to_user_id=assigned_to_user_id,
                priority=task_priority,
                due_date=due_date,
                created_by=actor_id,
            )
            created = await uow.tasks.create(task)
            await uow.commit()

            view = (await self._project(uow, [created]))[0]

        logger.info(
            "task_created", task_id=view.id, activity_id=view.activity_id, actor_id=actor_id
        )
        await self._hub.broadcast_all(TaskEvents.TASK_CREATED, view)
        return view

    async def update(
        self,
        task_id: int,
        actor_id: int,
        title: str | None = None,
        description: str | None = None,
        activity_id: int | None = None,
        assigned_to_user_id: object = ...,  # Sentinel to detect explicit None
        status: TaskStatus | str | None = None,
        priority: TaskPriority | str | None = None,
        due_date: object = ...,  # Sentinel to detect explicit None
    ) -> TaskView:
        """Apply a partial update. Last write wins."""
        if title is not None:
            title = require_text("title", title)

        async with self._uow_factory() as uow:
            task = await uow.tasks.get(task_id)
            if not task:
                raise TaskNotFoundError(task_id)

            if activity_id is not None and activity_id != task.activity_id:
                await self._require_activity(uow, activity_id)
            if (
                assigned_to_user_id is not ...
                and assigned_to_user_id is not None
                and assigned_to_user_id != task.assigned_to_user_id
            ):
                await self._require_user(uow, cast(int, assigned_to_user_id))

            new_status = parse_enum(TaskStatus, "status", status) if status is not None else None
            new_priority = (
                parse_enum(TaskPriority, "priority", priority) if priority is not None else None
            )

            if title is not None:
                task.title = title
            if description is not None:
                task.description = description
            if activity_id is not None:
                task.activity_id = activity_id
            if assigned_to_user_id is not ...:
                task.assigned_to_user_id = cast(int | None, assigned_to_user_id)
            if new_priority is not None:
                task.priority = new_priority
            if due_date is not ...:
                task.due_date = cast(datetime | None, due_date)
            if new_status is not None:
                task.change_status(new_status)
            task.touch()

            updated = await uow.tasks.update(task)
            await uow.commit()

            view = (await self._project(uow, [updated]))[0]

        logger.info("task_updated", task_id=task_id, actor_id=actor_id)
        await self._hub.broadcast_all(TaskEvents.TASK_UPDATED, view)
        return view

    async def update_status(
        self, task_id: int, status: TaskStatus | str, actor_id: int
    ) -> TaskView:
        """Move a task to a new status.

        completed_at is stamped on the first move into Completed and kept
        if the task later leaves Completed.
        """
        async with self._uow_factory() as uow:
            if not await uow.tasks.get(task_id):
                raise TaskNotFoundError(task_id)

            new_status = parse_enum(TaskStatus, "status", status)

            if not await uow.tasks.update_status(task_id, new_status):
                raise TaskNotFoundError(task_id)
            await uow.commit()

            task = await uow.tasks.get(task_id)
            if not task:
                raise TaskNotFoundError(task_id)
            view = (await self._project(uow, [task]))[0]

        logger.info(
            "task_status_changed", task_id=task_id, status=new_status.value, actor_id=actor_id
        )
        await self._hub.broadcast_all(TaskEvents.TASK_STATUS_CHANGED, task_id, new_status, view)
        return view

    async def assign(self, task_id: int, user_id: int | None, actor_id: int) -> TaskView:
        """Assign a task to an active user, or unassign it with None."""
        async with self._uow_factory() as uow:
            task = await uow.tasks.get(task_id)
            if not task:
                raise TaskNotFoundError(task_id)

            if user_id is not None:
                await self._require_user(uow, user_id)

            task.assign_to(user_id)
            updated = await uow.tasks.update(task)
            await uow.commit()

            view = (await self._project(uow, [updated]))[0]

        logger.info("task_assigned", task_id=task_id, user_id=user_id, actor_id=actor_id)
        await self._hub.broadcast_all(TaskEvents.TASK_ASSIGNED, view, user_id)
        return view

    async def delete(self, task_id: int, actor_id: int) -> bool:
        """Soft-delete a task. It disappears from every read."""
        async with self._uow_factory() as uow:
            if not await uow.tasks.get(task_id):
                raise TaskNotFoundError(task_id)

            if not await uow.tasks.delete(task_id):
                raise TaskNotFoundError(task_id)
            await uow.commit()

        logger.info("task_deleted", task_id=task_id, actor_id=actor_id)
        await self._hub.broadcast_all(TaskEvents.TASK_DELETED, task_id)
        return True

    # --- Helpers ---

    @staticmethod
    async def _require_activity(uow: IUnitOfWork, activity_id: int) -> None:
        activity = await uow.activities.get(activity_id)
        if not activity or not activity.is_active:
            raise ReferenceNotFoundError("activity", activity_id)

    @staticmethod
    async def _require_user(uow: IUnitOfWork, user_id: int) -> None:
        user = await uow.users.get(user_id)
        if not user or not user.is_active:
            raise ReferenceNotFoundError("user", user_id)

    @staticmethod
    async def _project(uow: IUnitOfWork, tasks: list[Task]) -> list[TaskView]:
        """Flatten tasks into views, resolving display names in two batched reads."""
        if not tasks:
            return []

        activities = await uow.activities.get_many(sorted({t.activity_id for t in tasks}))
        user_ids = {t.created_by for t in tasks} | {
            t.assigned_to_user_id for t in tasks if t.assigned_to_user_id is not None
        }
        users = await uow.users.get_many(sorted(user_ids))

        views = []
        for task in tasks:
            activity = activities.get(task.activity_id)
            assignee = (
                users.get(task.assigned_to_user_id)
                if task.assigned_to_user_id is not None
                else None
            )
            creator = users.get(task.created_by)
            views.append(
                TaskView(
                    id=cast(int, task.id),
                    title=task.title,
                    description=task.description,
                    activity_id=task.activity_id,
                    activity_name=activity.name if activity else UNKNOWN_NAME,
                    assigned_to_user_id=task.assigned_to_user_id,
                    assigned_to_name=assignee.full_name if assignee else UNASSIGNED,
                    status=task.status,
                    priority=task.priority,
                    due_date=task.due_date,
                    created_by=task.created_by,
                    created_by_name=creator.full_name if creator else UNKNOWN_NAME,
                    created_at=task.created_at,
                    updated_at=task.updated_at,
                    completed_at=task.completed_at,
                )
            )
        return views
