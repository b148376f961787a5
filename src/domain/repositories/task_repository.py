"""Task repository protocol."""

from typing import Protocol

from domain.entities.task import Task, TaskStatus


class ITaskRepository(Protocol):
    """Repository interface for Task entities.

    Every read only sees active (not soft-deleted) tasks.
    """

    async def get(self, id: int) -> Task | None:
        """Get an active task by ID."""
        ...

    async def get_all(self) -> list[Task]:
        """Get all active tasks, newest first."""
        ...

    async def get_by_assignee(self, user_id: int) -> list[Task]:
        """Get tasks assigned to a user, by due date then priority."""
        ...

    async def get_by_status(self, status: TaskStatus) -> list[Task]:
        """Get tasks in a status, newest first."""
        ...

    async def count_for_activity(self, activity_id: int) -> int:
        """Count every task row (active or not) referencing an activity."""
        ...

    async def create(self, task: Task) -> Task:
        """Persist a new task and return it with its generated ID."""
        ...

    async def update(self, task: Task) -> Task:
        """Overwrite the mutable fields of an existing task."""
        ...

    async def update_status(self, id: int, status: TaskStatus) -> bool:
        """Change only the status. Returns False if the task is absent."""
        ...

    async def delete(self, id: int) -> bool:
        """Soft-delete a task. Returns False if the task is absent."""
        ...
