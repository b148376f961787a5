"""User service layer."""

from collections.abc import Callable

import structlog

from core.exceptions import DuplicateValueError, InvalidInputError, UserNotFoundError
from domain.entities.user import User, UserRole
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.validation import parse_enum, require_text

logger = structlog.get_logger()

MAX_USERNAME_LENGTH = 100
MAX_EMAIL_LENGTH = 200


class UserService:
    """Service layer for user management and selection lists."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_active(self) -> list[User]:
        """Active users ordered by full name."""
        async with self._uow_factory() as uow:
            return await uow.users.get_all_active()

    async def get_by_id(self, user_id: int) -> User:
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(user_id)
            return user

    async def list_by_role(self, role: UserRole | str) -> list[User]:
        """Active users holding a role."""
        user_role = parse_enum(UserRole, "role", role)
        async with self._uow_factory() as uow:
            return await uow.users.get_by_role(user_role)

    async def create(
        self,
        username: str,
        full_name: str,
        email: str,
        role: UserRole | str = UserRole.USER,
    ) -> User:
        """Create a user. Username and email must both be unused."""
        username = require_text("username", username, MAX_USERNAME_LENGTH)
        full_name = require_text("full_name", full_name)
        email = _require_email(email)

        async with self._uow_factory() as uow:
            if await uow.users.get_by_username(username):
                raise DuplicateValueError("username", username)
            if await uow.users.get_by_email(email):
                raise DuplicateValueError("email", email)

            user_role = parse_enum(UserRole, "role", role)

            created = await uow.users.create(
                User(username=username, full_name=full_name, email=email, role=user_role)
            )
            await uow.commit()

        logger.info("user_created", user_id=created.id, role=created.role.value)
        return created

    async def update(
        self,
        user_id: int,
        full_name: str | None = None,
        email: str | None = None,
        role: UserRole | str | None = None,
        is_active: bool | None = None,
    ) -> User:
        """Update a user's profile fields. The username is immutable."""
        if full_name is not None:
            full_name = require_text("full_name", full_name)
        if email is not None:
            email = _require_email(email)

        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(user_id)

            if email is not None and email != user.email:
                existing = await uow.users.get_by_email(email)
                if existing and existing.id != user_id:
                    raise DuplicateValueError("email", email)

            if role is not None:
                user.role = parse_enum(UserRole, "role", role)
            if full_name is not None:
                user.full_name = full_name
            if email is not None:
                user.email = email
            if is_active is not None:
                user.is_active = is_active

            updated = await uow.users.update(user)
            await uow.commit()

        logger.info("user_updated", user_id=user_id)
        return updated

    async def deactivate(self, user_id: int) -> User:
        """Soft-delete a user; tasks and activities keep referencing them."""
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(user_id)

            user.deactivate()
            updated = await uow.users.update(user)
            await uow.commit()

        logger.info("user_deactivated", user_id=user_id)
        return updated


def _require_email(email: str | None) -> str:
    value = require_text("email", email, MAX_EMAIL_LENGTH)
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise InvalidInputError("email", "Email address is not valid")
    return value
