"""Activity repository protocol."""

from typing import Protocol

from domain.entities.activity import Activity


class IActivityRepository(Protocol):
    """Repository interface for Activity entities."""

    async def get(self, id: int) -> Activity | None:
        """Get an activity by ID (active or not)."""
        ...

    async def get_many(self, ids: list[int]) -> dict[int, Activity]:
        """Get several activities in one query, keyed by ID."""
        ...

    async def get_all_active(self) -> list[Activity]:
        """Get active activities ordered by name."""
        ...

    async def get_task_counts(self, ids: list[int]) -> dict[int, int]:
        """Count active tasks per activity in one query."""
        ...

    async def has_tasks(self, id: int) -> bool:
        """Whether any task row references the activity."""
        ...

    async def create(self, activity: Activity) -> Activity:
        """Persist a new activity."""
        ...

    async def update(self, activity: Activity) -> Activity:
        """Overwrite the mutable fields of an existing activity."""
        ...

    async def delete(self, id: int) -> bool:
        """Archive the activity if it owns tasks, otherwise remove it.

        Returns False if the activity is absent.
        """
        ...
