"""Task domain entity, enumerations and projection."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

UNASSIGNED = "Unassigned"
UNKNOWN_NAME = "N/A"


class TaskStatus(StrEnum):
    """Lifecycle states of a task."""

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    ON_HOLD = "OnHold"


class TaskPriority(StrEnum):
    """Task priority levels, lowest first."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        """Sort key where the most urgent priority is 0."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    TaskPriority.CRITICAL: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


@dataclass
class Task:
    """Domain entity for a unit of work inside an activity."""

    title: str
    activity_id: int
    created_by: int
    id: int | None = None
    description: str | None = None
    assigned_to_user_id: int | None = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    def change_status(self, status: TaskStatus) -> None:
        """Move the task to a new status.

        completed_at is stamped on the first transition into Completed and
        kept from then on, even if the status later moves away again.
        """
        now = datetime.utcnow()
        self.status = status
        if status is TaskStatus.COMPLETED and self.completed_at is None:
            self.completed_at = now
        self.touch(now)

    def assign_to(self, user_id: int | None) -> None:
        """Set or clear the assignee."""
        self.assigned_to_user_id = user_id
        self.touch()

    def touch(self, now: datetime | None = None) -> None:
        """Refresh updated_at."""
        self.updated_at = max(now or datetime.utcnow(), self.created_at)


@dataclass(frozen=True, slots=True)
class TaskView:
    """Read-only value object: flattened task for the API and observers."""

    id: int
    title: str
    description: str | None
    activity_id: int
    activity_name: str
    assigned_to_user_id: int | None
    assigned_to_name: str
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None
    created_by: int
    created_by_name: str
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None
