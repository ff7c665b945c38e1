from __future__ import annotations

from typing import Any, Optional


class CalfieldsError(ValueError):
    """Base error."""


class InvalidFieldValue(CalfieldsError):
    """Raised in strict mode when an externally set field lies outside its bounds."""

    def __init__(self, field: Any, value: int, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message or f"{_name(field)}: {value} is out of range")


class NonExistentDate(CalfieldsError):
    """Raised in strict mode for a date that falls in the cutover gap."""

    def __init__(self, year: int, month: int, day: int):
        self.year = year
        self.month = month
        self.day = day
        super().__init__(f"{year}-{month:02d}-{day:02d} does not exist in this calendar")


class InconsistentField(CalfieldsError):
    """Raised in strict mode when a set field disagrees with the resolved instant."""

    def __init__(self, field: Any, value: int, expected: int):
        self.field = field
        self.value = value
        self.expected = expected
        super().__init__(f"{_name(field)}: set to {value}, resolves to {expected}")


class UnknownField(CalfieldsError):
    """Raised for a field identifier an operation does not accept."""

    def __init__(self, field: Any, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"unknown field {field!r}")


def _name(field: Any) -> str:
    return getattr(field, "name", str(field))
