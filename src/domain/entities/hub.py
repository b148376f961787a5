"""Push-channel value objects and event name constants."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskEvents:
    """Event names pushed to observers (camelCase, as clients subscribe to them)."""

    TASK_CREATED = "taskCreated"
    TASK_UPDATED = "taskUpdated"
    TASK_STATUS_CHANGED = "taskStatusChanged"
    TASK_ASSIGNED = "taskAssigned"
    TASK_DELETED = "taskDeleted"

    # Free-form messages
    RECEIVE_NOTIFICATION = "receiveNotification"
    RECEIVE_MESSAGE = "receiveMessage"

    # Sent to a single connection when one of its frames is rejected
    ERROR = "error"


class ConnectionState(StrEnum):
    """Lifecycle of one observer connection."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


USER_GROUP_PREFIX = "user:"


def user_group(user_id: int) -> str:
    """Group key addressing every connection of one user."""
    return f"{USER_GROUP_PREFIX}{user_id}"


def is_user_group(group: str) -> bool:
    """Whether a group is reserved for one user's connections."""
    return group.startswith(USER_GROUP_PREFIX)


@dataclass(frozen=True, slots=True)
class HubMessage:
    """One event with its positional arguments."""

    event: str
    args: tuple[Any, ...] = ()

    def to_wire(self) -> dict[str, Any]:
        """Shape sent over the push channel."""
        return {"event": self.event, "args": list(self.args)}
