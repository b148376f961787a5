"""Pydantic schemas for Activity API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.activity import ActivityDeletion


class ActivityCreate(BaseModel):
    """Schema for creating an Activity."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field("", description="Required, at most 200 characters")
    description: str | None = Field(None, max_length=2000)
    start_date: datetime | None = None
    end_date: datetime | None = None


class ActivityUpdate(BaseModel):
    """Schema for updating an Activity (all fields optional)."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = Field(None, max_length=2000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool | None = None


class ActivityResponse(BaseModel):
    """Activity with its creator name and active task count."""

    model_config = ConfigDict(from_attributes=True)

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


class ActivityDeleteResult(BaseModel):
    """Outcome of deleting an activity."""

    id: int
    outcome: ActivityDeletion
