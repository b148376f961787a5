"""Input checks shared by the service layer."""

from enum import StrEnum
from typing import TypeVar

from core.exceptions import InvalidEnumValueError, InvalidInputError

E = TypeVar("E", bound=StrEnum)

MAX_TITLE_LENGTH = 200


def require_text(field: str, value: str | None, max_length: int = MAX_TITLE_LENGTH) -> str:
    """Return the stripped value, rejecting blanks and over-long strings."""
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(field, f"{field.capitalize()} is required")
    if len(text) > max_length:
        raise InvalidInputError(
            field, f"{field.capitalize()} must be at most {max_length} characters"
        )
    return text


def parse_enum(enum_cls: type[E], field: str, value: E | str) -> E:
    """Coerce a raw string into a member of a fixed enumeration.

    Matching is exact on the stored value ("InProgress", not "in_progress").
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidEnumValueError(field, value, [m.value for m in enum_cls]) from None
