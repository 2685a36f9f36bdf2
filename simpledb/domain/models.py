"""
Domain models for SimpleDB.

`Record` is the base every mapped type derives from: an integer identifier
(0 until the engine assigns one), a creation timestamp, an optional update
timestamp, a table name, and a validation predicate the repository checks before
every write. `Person` is the sample record used by the demo and the tests.

Records are mutable pydantic models: the repository assigns `id` after insert,
`update` stamps `updated_at`, and the materializer fills fields one by one.
Assignments are not re-validated.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ID_FIELD = "id"
UNASSIGNED_ID = 0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """
    Base class for every mapped entity.

    Subclasses must give every field a default so the type itself can serve as
    the zero-argument factory used during materialization.
    """

    id: int = Field(UNASSIGNED_ID, description="Primary key; 0 until assigned by the engine.")
    created_at: datetime = Field(default_factory=utc_now, description="Set at construction.")
    updated_at: Optional[datetime] = Field(None, description="Set by repository updates only.")

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        arbitrary_types_allowed=False,
    )

    @classmethod
    def get_table_name(cls) -> str:
        """Table this record type maps to. Must be constant for the type."""
        raise NotImplementedError(f"{cls.__name__} must define get_table_name()")

    def validate(self) -> bool:  # type: ignore[override]
        """Return True if the record may be written."""
        return True


class PersonStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class Person(Record):
    """A row in the `persons` table."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    date_of_birth: Optional[date] = None
    status: PersonStatus = PersonStatus.ACTIVE

    @classmethod
    def get_table_name(cls) -> str:
        return "persons"

    def validate(self) -> bool:  # type: ignore[override]
        return bool(self.first_name) and bool(self.last_name) and bool(self.email)


__all__ = ["ID_FIELD", "UNASSIGNED_ID", "Person", "PersonStatus", "Record", "utc_now"]
