"""Common Pydantic schemas shared across the API."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every successful response."""

    success: bool = True
    message: str = ""
    data: T | None = None


class ErrorResponse(BaseModel):
    """Envelope for failed requests."""

    success: bool = False
    message: str
    data: None = None
    error_code: str
    details: Any | None = None


def error_body(error_code: str, message: str, details: Any | None = None) -> dict[str, Any]:
    """Serialized ErrorResponse, for handlers that build responses directly."""
    return ErrorResponse(error_code=error_code, message=message, details=details).model_dump()
