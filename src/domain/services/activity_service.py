"""Activity service layer."""

from collections.abc import Callable
from datetime import datetime
from typing import cast

import structlog

from core.exceptions import ActivityNotFoundError, InvalidInputError, ReferenceNotFoundError
from domain.entities.activity import Activity, ActivityDeletion, ActivityView
from domain.entities.task import UNKNOWN_NAME
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.validation import require_text

logger = structlog.get_logger()


class ActivityService:
    """Service layer for activities (the containers tasks belong to)."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_active(self) -> list[ActivityView]:
        """Active activities by name, with creator name and active task count."""
        async with self._uow_factory() as uow:
            activities = await uow.activities.get_all_active()
            return await self._project(uow, activities)

    async def get_by_id(self, activity_id: int) -> ActivityView:
        """Get an activity, archived ones included."""
        async with self._uow_factory() as uow:
            activity = await uow.activities.get(activity_id)
            if not activity:
                raise ActivityNotFoundError(activity_id)
            return (await self._project(uow, [activity]))[0]

    async def create(
        self,
        actor_id: int,
        name: str,
        description: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> ActivityView:
        name = require_text("name", name)
        _check_date_range(start_date, end_date)

        async with self._uow_factory() as uow:
            if not await uow.users.get(actor_id):
                raise ReferenceNotFoundError("user", actor_id)

            created = await uow.activities.create(
                Activity(
                    name=name,
                    description=description,
                    start_date=start_date,
                    end_date=end_date,
                    created_by=actor_id,
                )
            )
            await uow.commit()
            view = (await self._project(uow, [created]))[0]

        logger.info("activity_created", activity_id=view.id, actor_id=actor_id)
        return view

    async def update(
        self,
        activity_id: int,
        name: str | None = None,
        description: str | None = None,
        start_date: object = ...,  # Sentinel to detect explicit None
        end_date: object = ...,  # Sentinel to detect explicit None
        is_active: bool | None = None,
    ) -> ActivityView:
        if name is not None:
            name = require_text("name", name)

        async with self._uow_factory() as uow:
            activity = await uow.activities.get(activity_id)
            if not activity:
                raise ActivityNotFoundError(activity_id)

            if name is not None:
                activity.name = name
            if description is not None:
                activity.description = description
            if start_date is not ...:
                activity.start_date = cast(datetime | None, start_date)
            if end_date is not ...:
                activity.end_date = cast(datetime | None, end_date)
            if is_active is not None:
                activity.is_active = is_active
            _check_date_range(activity.start_date, activity.end_date)

            updated = await uow.activities.update(activity)
            await uow.commit()
            view = (await self._project(uow, [updated]))[0]

        logger.info("activity_updated", activity_id=activity_id)
        return view

    async def delete(self, activity_id: int) -> ActivityDeletion:
        """Archive an activity that owns tasks; remove one that owns none."""
        async with self._uow_factory() as uow:
            if not await uow.activities.get(activity_id):
                raise ActivityNotFoundError(activity_id)

            outcome = (
                ActivityDeletion.ARCHIVED
                if await uow.activities.has_tasks(activity_id)
                else ActivityDeletion.REMOVED
            )
            await uow.activities.delete(activity_id)
            await uow.commit()

        logger.info("activity_deleted", activity_id=activity_id, outcome=outcome.value)
        return outcome

    @staticmethod
    async def _project(uow: IUnitOfWork, activities: list[Activity]) -> list[ActivityView]:
        if not activities:
            return []

        ids = [cast(int, a.id) for a in activities]
        counts = await uow.activities.get_task_counts(ids)
        creators = await uow.users.get_many(sorted({a.created_by for a in activities}))

        views = []
        for activity in activities:
            creator = creators.get(activity.created_by)
            views.append(
                ActivityView(
                    id=cast(int, activity.id),
                    name=activity.name,
                    description=activity.description,
                    start_date=activity.start_date,
                    end_date=activity.end_date,
                    created_by=activity.created_by,
                    created_by_name=creator.full_name if creator else UNKNOWN_NAME,
                    created_at=activity.created_at,
                    is_active=activity.is_active,
                    task_count=counts.get(cast(int, activity.id), 0),
                )
            )
        return views


def _check_date_range(start_date: datetime | None, end_date: datetime | None) -> None:
    if start_date and end_date and end_date < start_date:
        raise InvalidInputError("end_date", "End date must not be earlier than start date")
