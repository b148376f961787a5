"""User repository protocol."""

from typing import Protocol

from domain.entities.user import User, UserRole


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def get(self, id: int) -> User | None:
        """Get a user by ID (active or not)."""
        ...

    async def get_many(self, ids: list[int]) -> dict[int, User]:
        """Get several users in one query, keyed by ID."""
        ...

    async def get_by_username(self, username: str) -> User | None:
        """Get a user by username."""
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email."""
        ...

    async def get_all_active(self) -> list[User]:
        """Get active users ordered by full name."""
        ...

    async def get_by_role(self, role: UserRole) -> list[User]:
        """Get active users with a role, ordered by full name."""
        ...

    async def create(self, user: User) -> User:
        """Persist a new user."""
        ...

    async def update(self, user: User) -> User:
        """Overwrite the mutable fields of an existing user."""
        ...
