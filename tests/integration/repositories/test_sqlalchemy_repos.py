"""Integration tests for the SQLAlchemy repositories and unit of work."""

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import DuplicateValueError, StorageError, TaskNotFoundError
from domain.entities.activity import Activity
from domain.entities.task import Task, TaskStatus
from domain.entities.user import User
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


async def _seed_activity(uow: SQLAlchemyUnitOfWork, name: str = "Sprint 1") -> int:
    activity = await uow.activities.create(Activity(name=name, created_by=1))
    assert activity.id is not None
    return activity.id


class TestTaskRepository:
    @pytest.mark.asyncio
    async def test_count_includes_soft_deleted_rows(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            activity_id = await _seed_activity(uow)
            kept = await uow.tasks.create(Task(title="Kept", activity_id=activity_id, created_by=1))
            gone = await uow.tasks.create(Task(title="Gone", activity_id=activity_id, created_by=1))
            assert kept.id is not None and gone.id is not None
            await uow.tasks.delete(gone.id)
            await uow.commit()

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert await uow.tasks.count_for_activity(activity_id) == 2
            assert [t.title for t in await uow.tasks.get_all()] == ["Kept"]
            assert await uow.tasks.get(gone.id) is None
            assert await uow.activities.has_tasks(activity_id)
            assert await uow.activities.get_task_counts([activity_id]) == {activity_id: 1}

    @pytest.mark.asyncio
    async def test_create_defaults_to_pending(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            activity_id = await _seed_activity(uow)
            task = await uow.tasks.create(Task(title="New", activity_id=activity_id, created_by=1))
            await uow.commit()

        assert task.status is TaskStatus.PENDING
        assert task.updated_at >= task.created_at

    @pytest.mark.asyncio
    async def test_update_missing_task_raises(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            with pytest.raises(TaskNotFoundError):
                await uow.tasks.update(Task(id=999, title="Ghost", activity_id=1, created_by=1))

    @pytest.mark.asyncio
    async def test_update_status_stamps_completed_at_once(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            activity_id = await _seed_activity(uow)
            task = await uow.tasks.create(Task(title="Do", activity_id=activity_id, created_by=1))
            assert task.id is not None
            await uow.tasks.update_status(task.id, TaskStatus.COMPLETED)
            first = (await uow.tasks.get(task.id)).completed_at  # type: ignore[union-attr]
            await uow.tasks.update_status(task.id, TaskStatus.ON_HOLD)
            await uow.tasks.update_status(task.id, TaskStatus.COMPLETED)
            final = await uow.tasks.get(task.id)
            await uow.commit()

        assert first is not None
        assert final is not None and final.completed_at == first
        assert await _missing_status_update(session_factory) is False


async def _missing_status_update(session_factory: async_sessionmaker[AsyncSession]) -> bool:
    async with SQLAlchemyUnitOfWork(session_factory) as uow:
        return await uow.tasks.update_status(999, TaskStatus.COMPLETED)


class TestActivityRepository:
    @pytest.mark.asyncio
    async def test_delete_is_hard_without_tasks(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            activity_id = await _seed_activity(uow)
            assert await uow.activities.delete(activity_id) is True
            await uow.commit()

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert await uow.activities.get(activity_id) is None
            assert await uow.activities.delete(activity_id) is False


class TestUnitOfWork:
    @pytest.mark.asyncio
    async def test_sqlalchemy_errors_become_storage_errors(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        with pytest.raises(StorageError) as exc_info:
            async with SQLAlchemyUnitOfWork(session_factory) as uow:
                await uow._require_session().execute(text("SELECT * FROM missing_table"))

        assert exc_info.value.error_code == "DATABASE_ERROR"
        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_uncommitted_work_is_rolled_back(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        with pytest.raises(RuntimeError):
            async with SQLAlchemyUnitOfWork(session_factory) as uow:
                await _seed_activity(uow, "Never")
                raise RuntimeError("boom")

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert await uow.activities.get_all_active() == []


class TestUserRepository:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("username", "email", "field"),
        [("ada", "someone@example.com", "username"), ("someone", "ada@example.com", "email")],
    )
    async def test_unique_violation_is_a_duplicate(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        username: str,
        email: str,
        field: str,
    ) -> None:
        with pytest.raises(DuplicateValueError) as exc_info:
            async with SQLAlchemyUnitOfWork(session_factory) as uow:
                await uow.users.create(User(username=username, full_name="Twin", email=email))

        assert exc_info.value.details["field"] == field

    @pytest.mark.asyncio
    async def test_email_taken_on_update_is_a_duplicate(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            grace = await uow.users.create(
                User(username="grace", full_name="Grace Hopper", email="grace@example.com")
            )
            await uow.commit()

        grace.email = "ada@example.com"
        with pytest.raises(DuplicateValueError):
            async with SQLAlchemyUnitOfWork(session_factory) as uow:
                await uow.users.update(grace)

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            stored = await uow.users.get_by_username("grace")
            assert stored is not None and stored.email == "grace@example.com"
