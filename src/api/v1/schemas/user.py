"""Pydantic schemas for User API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.user import UserRole


class UserCreate(BaseModel):
    """Schema for creating a User."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field("", description="Required, at most 100 characters")
    full_name: str = Field("", description="Required, at most 200 characters")
    email: str = Field("", description="Required, at most 200 characters")
    role: str = Field("User", examples=["User"])


class UserUpdate(BaseModel):
    """Schema for updating a User (all fields optional, username is fixed)."""

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = None
    email: str | None = None
    role: str | None = None
    is_active: bool | None = None


class UserResponse(BaseModel):
    """Schema for User response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
