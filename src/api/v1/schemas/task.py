"""Pydantic schemas for Task API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.task import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a Task.

    Priority is a plain string so unknown values are reported as
    INVALID_ENUM_VALUE rather than a generic validation error. The title is
    checked by the service, so a missing, blank or over-long title is
    INVALID_INPUT.
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field("", description="Required, at most 200 characters")
    description: str | None = Field(None, max_length=2000)
    activity_id: int
    assigned_to_user_id: int | None = None
    priority: str | None = Field(None, examples=["Medium"])
    due_date: datetime | None = None


class TaskUpdate(BaseModel):
    """Schema for updating a Task (all fields optional).

    Send `assigned_to_user_id` or `due_date` as `null` to clear them;
    omit them to leave them unchanged.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = Field(None, max_length=2000)
    activity_id: int | None = None
    assigned_to_user_id: int | None = None
    status: str | None = Field(None, examples=["InProgress"])
    priority: str | None = Field(None, examples=["High"])
    due_date: datetime | None = None


class TaskStatusUpdate(BaseModel):
    """Body of the status-only endpoint."""

    model_config = ConfigDict(extra="forbid")

    status: str = Field(..., examples=["Completed"])


class TaskResponse(BaseModel):
    """Flattened task with resolved display names."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Write docs",
                "description": None,
                "activity_id": 1,
                "activity_name": "Sprint 1",
                "assigned_to_user_id": None,
                "assigned_to_name": "Unassigned",
                "status": "Pending",
                "priority": "Medium",
                "due_date": None,
                "created_by": 1,
                "created_by_name": "Ada Lovelace",
                "created_at": "2026-01-28T10:00:00",
                "updated_at": "2026-01-28T10:00:00",
                "completed_at": None,
            }
        },
    )

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
