"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserModel(Base):
    """Team member model."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(
        String(50),
        CheckConstraint("role IN ('Admin', 'User')", name="ck_users_role"),
        nullable=False,
        default="User",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships (back-references only; nothing cascades)
    created_activities: Mapped[list["ActivityModel"]] = relationship(
        "ActivityModel",
        back_populates="creator",
        foreign_keys="ActivityModel.created_by",
    )
    assigned_tasks: Mapped[list["TaskModel"]] = relationship(
        "TaskModel",
        back_populates="assignee",
        foreign_keys="TaskModel.assigned_to_user_id",
    )
    created_tasks: Mapped[list["TaskModel"]] = relationship(
        "TaskModel",
        back_populates="creator",
        foreign_keys="TaskModel.created_by",
    )


class ActivityModel(Base):
    """Activity (work package) model."""

    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[datetime | None] = mapped_column(DateTime)
    end_date: Mapped[datetime | None] = mapped_column(DateTime)
    created_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    creator: Mapped["UserModel"] = relationship(
        "UserModel",
        back_populates="created_activities",
        foreign_keys=[created_by],
    )
    tasks: Mapped[list["TaskModel"]] = relationship(
        "TaskModel",
        back_populates="activity",
        passive_deletes="all",
    )


class TaskModel(Base):
    """Task model."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "status IN ('Pending', 'InProgress', 'Completed', 'OnHold')",
            name="ck_tasks_status",
        ),
        CheckConstraint(
            "priority IN ('Low', 'Medium', 'High', 'Critical')",
            name="ck_tasks_priority",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    activity_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("activities.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    assigned_to_user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        index=True,
    )
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Pending", index=True)
    priority: Mapped[str] = mapped_column(String(50), nullable=False, default="Medium")
    due_date: Mapped[datetime | None] = mapped_column(DateTime)
    created_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    activity: Mapped["ActivityModel"] = relationship(
        "ActivityModel",
        back_populates="tasks",
    )
    assignee: Mapped[Optional["UserModel"]] = relationship(
        "UserModel",
        back_populates="assigned_tasks",
        foreign_keys=[assigned_to_user_id],
    )
    creator: Mapped["UserModel"] = relationship(
        "UserModel",
        back_populates="created_tasks",
        foreign_keys=[created_by],
    )
