"""Unit tests for ActivityService."""

from datetime import datetime

import pytest

from core.exceptions import ActivityNotFoundError, InvalidInputError, ReferenceNotFoundError
from domain.entities.activity import Activity, ActivityDeletion
from domain.services.activity_service import ActivityService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(seeded_uow: FakeUnitOfWork) -> ActivityService:
    return ActivityService(lambda: seeded_uow)


async def _persist(activity: Activity) -> Activity:
    activity.id = 11
    return activity


async def _echo(activity: Activity) -> Activity:
    return activity


class TestListActive:
    @pytest.mark.asyncio
    async def test_includes_creator_name_and_task_count(
        self, service: ActivityService, seeded_uow: FakeUnitOfWork, activity: Activity
    ):
        seeded_uow.activities.get_all_active.return_value = [activity]
        seeded_uow.activities.get_task_counts.return_value = {10: 3}

        views = await service.list_active()

        assert len(views) == 1
        assert views[0].name == "Sprint 1"
        assert views[0].created_by_name == "Ada Lovelace"
        assert views[0].task_count == 3


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_activity(
        self, service: ActivityService, seeded_uow: FakeUnitOfWork
    ):
        seeded_uow.activities.create.side_effect = _persist
        seeded_uow.activities.get_task_counts.return_value = {}

        view = await service.create(actor_id=1, name="Sprint 2")

        assert view.id == 11
        assert view.task_count == 0
        assert view.is_active
        assert seeded_uow.committed

    @pytest.mark.asyncio
    async def test_end_before_start(self, service: ActivityService, seeded_uow: FakeUnitOfWork):
        with pytest.raises(InvalidInputError):
            await service.create(
                actor_id=1,
                name="Backwards",
                start_date=datetime(2026, 5, 2),
                end_date=datetime(2026, 5, 1),
            )

        seeded_uow.activities.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_creator(self, service: ActivityService):
        with pytest.raises(ReferenceNotFoundError):
            await service.create(actor_id=404, name="Ghost")


class TestUpdate:
    @pytest.mark.asyncio
    async def test_clears_end_date_explicitly(
        self, service: ActivityService, seeded_uow: FakeUnitOfWork, activity: Activity
    ):
        activity.end_date = datetime(2026, 6, 1)
        seeded_uow.activities.update.side_effect = _echo
        seeded_uow.activities.get_task_counts.return_value = {}

        view = await service.update(10, end_date=None)

        assert view.end_date is None
        assert view.name == "Sprint 1"

    @pytest.mark.asyncio
    async def test_checks_resulting_date_range(
        self, service: ActivityService, activity: Activity
    ):
        activity.start_date = datetime(2026, 6, 1)

        with pytest.raises(InvalidInputError):
            await service.update(10, end_date=datetime(2026, 5, 1))

    @pytest.mark.asyncio
    async def test_missing_activity(self, service: ActivityService):
        with pytest.raises(ActivityNotFoundError):
            await service.update(404, name="X")


class TestDelete:
    @pytest.mark.asyncio
    async def test_archives_when_tasks_exist(
        self, service: ActivityService, seeded_uow: FakeUnitOfWork
    ):
        seeded_uow.activities.has_tasks.return_value = True
        seeded_uow.activities.delete.return_value = True

        outcome = await service.delete(10)

        assert outcome is ActivityDeletion.ARCHIVED
        seeded_uow.activities.delete.assert_awaited_once_with(10)
        assert seeded_uow.committed

    @pytest.mark.asyncio
    async def test_removes_when_empty(
        self, service: ActivityService, seeded_uow: FakeUnitOfWork
    ):
        seeded_uow.activities.has_tasks.return_value = False
        seeded_uow.activities.delete.return_value = True

        assert await service.delete(10) is ActivityDeletion.REMOVED

    @pytest.mark.asyncio
    async def test_missing_activity(
        self, service: ActivityService, seeded_uow: FakeUnitOfWork
    ):
        with pytest.raises(ActivityNotFoundError):
            await service.delete(404)

        seeded_uow.activities.delete.assert_not_called()
