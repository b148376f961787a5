"""Custom exceptions and error codes."""

from collections.abc import Iterable
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Not found errors (404)
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ACTIVITY_NOT_FOUND = "ACTIVITY_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
    INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"

    # Conflict errors (409)
    DUPLICATE_VALUE = "DUPLICATE_VALUE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class InvalidInputError(AppException):
    """A required field is missing or malformed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_INPUT,
            message=message,
            status_code=400,
            details={"field": field},
        )


class ReferenceNotFoundError(AppException):
    """A referenced activity or user does not exist (or is inactive)."""

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(
            error_code=ErrorCode.REFERENCE_NOT_FOUND,
            message=f"Referenced {entity} not found: {entity_id}",
            status_code=400,
            details={"entity": entity, "id": entity_id},
        )


class InvalidEnumValueError(AppException):
    """A status, priority or role value is outside its fixed set."""

    def __init__(self, field: str, value: Any, allowed: Iterable[str]) -> None:
        allowed = list(allowed)
        super().__init__(
            error_code=ErrorCode.INVALID_ENUM_VALUE,
            message=f"Invalid {field}: {value!r}. Valid values: {', '.join(allowed)}",
            status_code=400,
            details={"field": field, "value": value, "allowed": allowed},
        )


class TaskNotFoundError(AppException):
    """Task not found."""

    def __init__(self, task_id: int) -> None:
        super().__init__(
            error_code=ErrorCode.TASK_NOT_FOUND,
            message=f"Task not found: {task_id}",
            status_code=404,
            details={"task_id": task_id},
        )


class UserNotFoundError(AppException):
    """User not found."""

    def __init__(self, user_id: int) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message=f"User not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class ActivityNotFoundError(AppException):
    """Activity not found."""

    def __init__(self, activity_id: int) -> None:
        super().__init__(
            error_code=ErrorCode.ACTIVITY_NOT_FOUND,
            message=f"Activity not found: {activity_id}",
            status_code=404,
            details={"activity_id": activity_id},
        )


class DuplicateValueError(AppException):
    """A unique field (username, email) is already taken."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_VALUE,
            message=f"{field.capitalize()} already exists: {value}",
            status_code=409,
            details={"field": field, "value": value},
        )


class StorageError(AppException):
    """The underlying persistence layer failed."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=f"Storage failure during {operation}: {cause}",
            status_code=500,
            details={"operation": operation, "cause": type(cause).__name__},
        )
