"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.entities.activity import Activity
from domain.entities.user import User, UserRole


class FakeUnitOfWork:
    """Fake Unit of Work with the three repository mocks for unit testing."""

    def __init__(self) -> None:
        self.users = AsyncMock()
        self.activities = AsyncMock()
        self.tasks = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def mock_hub() -> AsyncMock:
    """Hub stand-in recording broadcast calls."""
    return AsyncMock()


@pytest.fixture
def creator() -> User:
    return User(
        id=1,
        username="ada",
        full_name="Ada Lovelace",
        email="ada@example.com",
        role=UserRole.ADMIN,
    )


@pytest.fixture
def assignee() -> User:
    return User(id=2, username="grace", full_name="Grace Hopper", email="grace@example.com")


@pytest.fixture
def activity() -> Activity:
    return Activity(id=10, name="Sprint 1", created_by=1)


@pytest.fixture
def seeded_uow(
    uow: FakeUnitOfWork, creator: User, assignee: User, activity: Activity
) -> FakeUnitOfWork:
    """FakeUnitOfWork whose user/activity lookups resolve the fixtures above."""
    users = {creator.id: creator, assignee.id: assignee}
    activities = {activity.id: activity}

    async def get_user(user_id: int) -> User | None:
        return users.get(user_id)

    async def get_users(ids: list[int]) -> dict[int, User]:
        return {i: users[i] for i in ids if i in users}

    async def get_activity(activity_id: int) -> Activity | None:
        return activities.get(activity_id)

    async def get_activities(ids: list[int]) -> dict[int, Activity]:
        return {i: activities[i] for i in ids if i in activities}

    uow.users.get.side_effect = get_user
    uow.users.get_many.side_effect = get_users
    uow.activities.get.side_effect = get_activity
    uow.activities.get_many.side_effect = get_activities
    return uow
