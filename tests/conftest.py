"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

# Disable rate limiting in tests and keep the default engine off PostgreSQL
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.hub import HubMessage
from domain.services.notification_hub import NotificationHub
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, UserModel

# Fixed test user ID for consistency (seeded into every test database)
TEST_USER_ID = 1


class RecordingObserver:
    """Observer that keeps every message it is sent."""

    def __init__(self) -> None:
        self.messages: list[HubMessage] = []
        self.closed = False

    async def send(self, message: HubMessage) -> None:
        self.messages.append(message)

    async def close(self) -> None:
        self.closed = True

    @property
    def events(self) -> list[str]:
        return [m.event for m in self.messages]


@pytest.fixture
def session_factory(tmp_path: Path) -> Generator[async_sessionmaker[AsyncSession], None, None]:
    """Session factory over a fresh SQLite file database.

    The schema and the acting user are created with a synchronous engine so
    the database can be shared by any event loop (including the one the
    Starlette TestClient runs in). NullPool keeps connections loop-local.
    """
    db_path = tmp_path / "test.db"

    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    with Session(sync_engine) as session:
        session.add(
            UserModel(
                id=TEST_USER_ID,
                username="ada",
                full_name="Ada Lovelace",
                email="ada@example.com",
                role="Admin",
            )
        )
        session.commit()
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def hub() -> AsyncGenerator[NotificationHub, None]:
    """A private hub with a short send timeout."""
    hub = NotificationHub(max_pending=32, send_timeout=1.0)
    yield hub
    await hub.close()


@pytest.fixture
def make_recorder() -> type[RecordingObserver]:
    return RecordingObserver


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(id=TEST_USER_ID, username="ada", role="Admin")


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


def build_test_app(
    session_factory: async_sessionmaker[AsyncSession],
    hub: NotificationHub,
    test_user: TokenUser,
    auth_provider: JWTAuthProvider,
) -> FastAPI:
    """
    Create the application wired to a test database and hub.

    - Overrides auth dependency to return the test user
    - Overrides UoW-backed services to use the test session factory
    - Injects the given hub into the task service and the socket endpoint
    """
    from api.dependencies.auth import get_auth_provider, get_current_user
    from api.v1.dependencies import (
        get_activity_service,
        get_notification_hub,
        get_task_service,
        get_user_service,
    )
    from domain.services.activity_service import ActivityService
    from domain.services.task_service import TaskService
    from domain.services.user_service import UserService
    from infrastructure.database.session import get_async_session
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    app = create_app()

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    async def override_get_user() -> TokenUser:
        return test_user

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    task_service = TaskService(test_uow_factory, hub=hub)
    user_service = UserService(test_uow_factory)
    activity_service = ActivityService(test_uow_factory)

    app.dependency_overrides[get_current_user] = override_get_user
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_notification_hub] = lambda: hub
    app.dependency_overrides[get_task_service] = lambda: task_service
    app.dependency_overrides[get_user_service] = lambda: user_service
    app.dependency_overrides[get_activity_service] = lambda: activity_service
    app.dependency_overrides[get_async_session] = override_get_session

    return app


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def authenticated_client(
    session_factory: async_sessionmaker[AsyncSession],
    hub: NotificationHub,
    test_user: TokenUser,
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated client over the test database, sharing the `hub` fixture."""
    app = build_test_app(session_factory, hub, test_user, auth_provider)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
