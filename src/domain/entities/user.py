"""User domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class UserRole(StrEnum):
    """Fixed set of user roles."""

    ADMIN = "Admin"
    USER = "User"


@dataclass
class User:
    """Domain entity for a team member.

    Users are never physically removed; deactivation keeps historical
    task and activity references valid.
    """

    username: str
    full_name: str
    email: str
    role: UserRole = UserRole.USER
    id: int | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)

    def deactivate(self) -> None:
        """Soft-delete the user."""
        self.is_active = False
