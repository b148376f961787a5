"""SQLAlchemy implementation of Task repository."""

from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import TaskNotFoundError
from domain.entities.task import Task, TaskPriority, TaskStatus
from infrastructure.database.models import TaskModel

# Most urgent first when ordering a user's queue.
_priority_rank = case(
    {priority.value: priority.rank for priority in TaskPriority},
    value=TaskModel.priority,
    else_=len(TaskPriority),
)


class SQLAlchemyTaskRepository:
    """SQLAlchemy implementation of ITaskRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: int) -> Task | None:
        """Get an active task by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_all(self) -> list[Task]:
        """Get all active tasks, newest first."""
        stmt = (
            select(TaskModel)
            .where(TaskModel.is_active.is_(True))
            .order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_by_assignee(self, user_id: int) -> list[Task]:
        """Get a user's tasks: soonest due first (undated last), then most urgent."""
        stmt = (
            select(TaskModel)
            .where(
                TaskModel.assigned_to_user_id == user_id,
                TaskModel.is_active.is_(True),
            )
            .order_by(
                TaskModel.due_date.is_(None),
                TaskModel.due_date,
                _priority_rank,
                TaskModel.id,
            )
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_by_status(self, status: TaskStatus) -> list[Task]:
        """Get tasks in a status, newest first."""
        stmt = (
            select(TaskModel)
            .where(
                TaskModel.status == status.value,
                TaskModel.is_active.is_(True),
            )
            .order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def count_for_activity(self, activity_id: int) -> int:
        """Count every task row (active or not) referencing an activity."""
        stmt = select(func.count()).select_from(TaskModel).where(
            TaskModel.activity_id == activity_id
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def create(self, task: Task) -> Task:
        """Create a new task with fresh timestamps."""
        now = datetime.utcnow()
        task.created_at = now
        task.updated_at = now
        task.is_active = True
        if not task.status:
            task.status = TaskStatus.PENDING
        if task.status is TaskStatus.COMPLETED and task.completed_at is None:
            task.completed_at = now

        model = self._to_model(task)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, task: Task) -> Task:
        """Update an existing task."""
        model = await self._get_model(task.id) if task.id is not None else None

        if not model:
            raise TaskNotFoundError(task.id or 0)

        now = datetime.utcnow()

        # Update fields
        model.title = task.title
        model.description = task.description
        model.activity_id = task.activity_id
        model.assigned_to_user_id = task.assigned_to_user_id
        model.priority = task.priority.value
        model.due_date = task.due_date
        self._apply_status(model, task.status, now)
        if model.completed_at is None and task.completed_at is not None:
            model.completed_at = task.completed_at
        model.updated_at = max(now, model.created_at)

        await self._session.flush()
        return self._to_entity(model)

    async def update_status(self, id: int, status: TaskStatus) -> bool:
        """Change only the status of a task."""
        model = await self._get_model(id)
        if not model:
            return False

        now = datetime.utcnow()
        self._apply_status(model, status, now)
        model.updated_at = max(now, model.created_at)

        await self._session.flush()
        return True

    async def delete(self, id: int) -> bool:
        """Soft-delete a task (it disappears from every read)."""
        model = await self._get_model(id)
        if not model:
            return False

        model.is_active = False
        model.updated_at = max(datetime.utcnow(), model.created_at)

        await self._session.flush()
        return True

    async def _get_model(self, id: int) -> TaskModel | None:
        stmt = select(TaskModel).where(TaskModel.id == id, TaskModel.is_active.is_(True))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _apply_status(model: TaskModel, status: TaskStatus, now: datetime) -> None:
        """Set status; stamp completed_at once, on the first move into Completed."""
        model.status = status.value
        if status is TaskStatus.COMPLETED and model.completed_at is None:
            model.completed_at = now

    def _to_entity(self, model: TaskModel) -> Task:
        """Convert ORM model to domain entity."""
        return Task(
            id=model.id,
            title=model.title,
            description=model.description,
            activity_id=model.activity_id,
            assigned_to_user_id=model.assigned_to_user_id,
            status=TaskStatus(model.status),
            priority=TaskPriority(model.priority),
            due_date=model.due_date,
            created_by=model.created_by,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
            completed_at=model.completed_at,
        )

    def _to_model(self, entity: Task) -> TaskModel:
        """Convert domain entity to ORM model."""
        return TaskModel(
            id=entity.id,
            title=entity.title,
            description=entity.description,
            activity_id=entity.activity_id,
            assigned_to_user_id=entity.assigned_to_user_id,
            status=entity.status.value,
            priority=entity.priority.value,
            due_date=entity.due_date,
            created_by=entity.created_by,
            is_active=entity.is_active,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            completed_at=entity.completed_at,
        )
