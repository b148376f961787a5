"""SQLAlchemy implementation of User repository."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateValueError, UserNotFoundError
from domain.entities.user import User, UserRole
from infrastructure.database.models import UserModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: int) -> User | None:
        """Get a user by ID."""
        model = await self._session.get(UserModel, id)
        return self._to_entity(model) if model else None

    async def get_many(self, ids: list[int]) -> dict[int, User]:
        """Get several users in one query."""
        if not ids:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(set(ids)))
        result = await self._session.execute(stmt)
        return {model.id: self._to_entity(model) for model in result.scalars()}

    async def get_by_username(self, username: str) -> User | None:
        """Get a user by username."""
        stmt = select(UserModel).where(UserModel.username == username)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email."""
        stmt = select(UserModel).where(UserModel.email == email)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_all_active(self) -> list[User]:
        """Get active users for selection lists."""
        stmt = (
            select(UserModel)
            .where(UserModel.is_active.is_(True))
            .order_by(UserModel.full_name, UserModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_by_role(self, role: UserRole) -> list[User]:
        """Get active users with a role."""
        stmt = (
            select(UserModel)
            .where(UserModel.role == role.value, UserModel.is_active.is_(True))
            .order_by(UserModel.full_name, UserModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, user: User) -> User:
        """Create a new user."""
        model = self._to_model(user)
        self._session.add(model)
        await self._flush_unique(user)
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, user: User) -> User:
        """Update an existing user."""
        model = await self._session.get(UserModel, user.id) if user.id is not None else None

        if not model:
            raise UserNotFoundError(user.id or 0)

        model.full_name = user.full_name
        model.email = user.email
        model.role = user.role.value
        model.is_active = user.is_active

        await self._flush_unique(user)
        return self._to_entity(model)

    async def _flush_unique(self, user: User) -> None:
        """Flush, reporting a lost username/email race as a duplicate."""
        try:
            await self._session.flush()
        except IntegrityError as exc:
            if "email" in str(exc.orig).lower():
                raise DuplicateValueError("email", user.email) from exc
            raise DuplicateValueError("username", user.username) from exc

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            username=model.username,
            full_name=model.full_name,
            email=model.email,
            role=UserRole(model.role),
            is_active=model.is_active,
            created_at=model.created_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        """Convert domain entity to ORM model."""
        return UserModel(
            id=entity.id,
            username=entity.username,
            full_name=entity.full_name,
            email=entity.email,
            role=entity.role.value,
            is_active=entity.is_active,
            created_at=entity.created_at,
        )
