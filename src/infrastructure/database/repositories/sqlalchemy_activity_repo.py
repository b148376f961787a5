"""SQLAlchemy implementation of Activity repository."""

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ActivityNotFoundError
from domain.entities.activity import Activity
from infrastructure.database.models import ActivityModel, TaskModel


class SQLAlchemyActivityRepository:
    """SQLAlchemy implementation of IActivityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: int) -> Activity | None:
        """Get an activity by ID."""
        model = await self._session.get(ActivityModel, id)
        return self._to_entity(model) if model else None

    async def get_many(self, ids: list[int]) -> dict[int, Activity]:
        """Get several activities in one query."""
        if not ids:
            return {}
        stmt = select(ActivityModel).where(ActivityModel.id.in_(set(ids)))
        result = await self._session.execute(stmt)
        return {model.id: self._to_entity(model) for model in result.scalars()}

    async def get_all_active(self) -> list[Activity]:
        """Get active activities for selection lists."""
        stmt = (
            select(ActivityModel)
            .where(ActivityModel.is_active.is_(True))
            .order_by(ActivityModel.name, ActivityModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_task_counts(self, ids: list[int]) -> dict[int, int]:
        """Count active tasks per activity in a single query."""
        if not ids:
            return {}
        stmt = (
            select(TaskModel.activity_id, func.count().label("task_count"))
            .where(TaskModel.activity_id.in_(set(ids)), TaskModel.is_active.is_(True))
            .group_by(TaskModel.activity_id)
        )
        result = await self._session.execute(stmt)
        return {row.activity_id: row.task_count for row in result}

    async def has_tasks(self, id: int) -> bool:
        """Whether any task row (active or archived) references the activity."""
        stmt = select(exists().where(TaskModel.activity_id == id))
        result = await self._session.execute(stmt)
        return bool(result.scalar())

    async def create(self, activity: Activity) -> Activity:
        """Create a new activity."""
        model = self._to_model(activity)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, activity: Activity) -> Activity:
        """Update an existing activity."""
        model = (
            await self._session.get(ActivityModel, activity.id)
            if activity.id is not None
            else None
        )

        if not model:
            raise ActivityNotFoundError(activity.id or 0)

        model.name = activity.name
        model.description = activity.description
        model.start_date = activity.start_date
        model.end_date = activity.end_date
        model.is_active = activity.is_active

        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, id: int) -> bool:
        """Archive an activity that owns tasks; remove one that owns none."""
        model = await self._session.get(ActivityModel, id)

        if not model:
            return False

        if await self.has_tasks(id):
            model.is_active = False
        else:
            await self._session.delete(model)

        await self._session.flush()
        return True

    def _to_entity(self, model: ActivityModel) -> Activity:
        """Convert ORM model to domain entity."""
        return Activity(
            id=model.id,
            name=model.name,
            description=model.description,
            start_date=model.start_date,
            end_date=model.end_date,
            created_by=model.created_by,
            is_active=model.is_active,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Activity) -> ActivityModel:
        """Convert domain entity to ORM model."""
        return ActivityModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            start_date=entity.start_date,
            end_date=entity.end_date,
            created_by=entity.created_by,
            is_active=entity.is_active,
            created_at=entity.created_at,
        )
