"""
Error taxonomy for SimpleDB.

Every failure raised by the repository, the mapper, or an engine adapter derives
from DataAccessError so callers can catch the whole family in one place. Absence
of data is never an error: lookups return None or an empty list instead.
"""

from __future__ import annotations

from typing import Any, Optional


class DataAccessError(Exception):
    """Base class for all SimpleDB errors."""


class ValidationError(DataAccessError):
    """A record failed its own validate() check. Raised before any statement is issued."""

    def __init__(self, record: Any, message: Optional[str] = None) -> None:
        self.record = record
        super().__init__(message or f"{type(record).__name__} failed validation.")


class InvalidArgumentError(DataAccessError, ValueError):
    """An argument was rejected before any I/O (non-positive id, bad identifier)."""


class MappingError(DataAccessError, ValueError):
    """A raw column value could not be converted to the declared field type."""

    def __init__(self, field: str, value: Any, target: Any, reason: str = "") -> None:
        self.field = field
        self.value = value
        self.target = target
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"Cannot map value {value!r} to field '{field}' ({getattr(target, '__name__', target)}){detail}"
        )


class DatabaseConnectionError(DataAccessError, ConnectionError):
    """
    The underlying engine failed to open a session or execute a statement.

    The driver exception is always chained as __cause__.
    """


__all__ = [
    "DataAccessError",
    "ValidationError",
    "InvalidArgumentError",
    "MappingError",
    "DatabaseConnectionError",
]
