"""
Field validation rules.

Each rule is a pure function that returns None when the value passes, or a
FieldError carrying a machine-readable code when it fails. Rules never touch
persistence and never raise; FieldErrorCollector aggregates failures so a
caller can report every offending field at once.
"""

import re
from datetime import date
from enum import Enum
from typing import Optional, TypeVar

from app.domain.management.errors import FieldError, ValidationFailedError

BLANK_FIELD = "BLANK_FIELD"
INVALID_EMAIL = "INVALID_EMAIL"
TOO_SHORT = "TOO_SHORT"
TOO_LONG = "TOO_LONG"
INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
REQUIRED_FIELD = "REQUIRED_FIELD"
OUT_OF_RANGE = "OUT_OF_RANGE"

# local@domain, no whitespace, exactly one @
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+$")

EnumT = TypeVar("EnumT", bound=Enum)


def non_blank(field: str, value: Optional[str]) -> Optional[FieldError]:
    """Fail with BLANK_FIELD when the value is missing or only whitespace."""
    if value is None or not value.strip():
        return FieldError(field, BLANK_FIELD, f"{field} must not be blank")
    return None


def valid_email(field: str, value: str) -> Optional[FieldError]:
    """Fail with INVALID_EMAIL when the value is not a local@domain address."""
    if not EMAIL_PATTERN.match(value):
        return FieldError(field, INVALID_EMAIL, f"{field} must be a valid email address")
    return None


def min_length(field: str, value: str, minimum: int) -> Optional[FieldError]:
    """Fail with TOO_SHORT when the value has fewer than ``minimum`` characters."""
    if len(value) < minimum:
        return FieldError(
            field, TOO_SHORT, f"{field} must be at least {minimum} characters"
        )
    return None


def max_length(field: str, value: str, maximum: int) -> Optional[FieldError]:
    """Fail with TOO_LONG when the value has more than ``maximum`` characters."""
    if len(value) > maximum:
        return FieldError(
            field, TOO_LONG, f"{field} must be at most {maximum} characters"
        )
    return None


def enum_member(
    field: str, value: str, enum_type: type[EnumT]
) -> Optional[FieldError]:
    """Fail with INVALID_ENUM_VALUE unless value names a variant exactly.

    Matching is case-sensitive: "in_progress" is not IN_PROGRESS.
    """
    if value not in enum_type.__members__:
        allowed = ", ".join(enum_type.__members__)
        return FieldError(
            field, INVALID_ENUM_VALUE, f"{field} must be one of: {allowed}"
        )
    return None


def date_order(
    field: str, start: Optional[date], end: Optional[date]
) -> Optional[FieldError]:
    """Fail with INVALID_DATE_RANGE when end is before start.

    Either bound being absent passes.
    """
    if start is not None and end is not None and end < start:
        return FieldError(
            field, INVALID_DATE_RANGE, f"{field} must not be before the start date"
        )
    return None


def required(field: str, value: object) -> Optional[FieldError]:
    """Fail with REQUIRED_FIELD when a non-string value is missing."""
    if value is None:
        return FieldError(field, REQUIRED_FIELD, f"{field} is required")
    return None


def in_range(field: str, value: int, low: int, high: int) -> Optional[FieldError]:
    """Fail with OUT_OF_RANGE when value falls outside [low, high]."""
    if not low <= value <= high:
        return FieldError(
            field, OUT_OF_RANGE, f"{field} must be between {low} and {high}"
        )
    return None


class FieldErrorCollector:
    """Accumulates rule results and raises them together.

    Usage::

        errors = FieldErrorCollector()
        errors.check(non_blank("username", command.username))
        errors.check(valid_email("email", command.email))
        errors.raise_if_any()
    """

    def __init__(self) -> None:
        self._errors: list[FieldError] = []

    def check(self, result: Optional[FieldError]) -> bool:
        """Record a failed rule. Returns True when the rule passed."""
        if result is None:
            return True
        self._errors.append(result)
        return False

    def has_error(self, field: str) -> bool:
        return any(error.field == field for error in self._errors)

    @property
    def errors(self) -> list[FieldError]:
        return list(self._errors)

    def raise_if_any(self) -> None:
        """Raise ValidationFailedError listing every recorded failure."""
        if self._errors:
            raise ValidationFailedError(self._errors)
