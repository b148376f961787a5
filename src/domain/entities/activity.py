"""Activity domain entity and read view."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class ActivityDeletion(StrEnum):
    """Outcome of deleting an activity."""

    ARCHIVED = "archived"
    REMOVED = "removed"


@dataclass
class Activity:
    """Domain entity for an activity (a work package that groups tasks)."""

    name: str
    created_by: int
    id: int | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True, slots=True)
class ActivityView:
    """Read-only value object: activity with its creator name and task count."""

    id: int
    name: str
    description: str | None
    start_date: datetime | None
    end_date: datetime | None
    created_by: int
    created_by_name: str
    created_at: datetime
    is_active: bool
    task_count: int = 0
