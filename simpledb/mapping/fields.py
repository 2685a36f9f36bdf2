"""
Field descriptors for record types.

`describe(record_type)` turns a record class into an ordered tuple of
FieldDescriptor objects. It is computed once per type from pydantic's
`model_fields` (declared order) and cached. The projector and the materializer
both work from these descriptors rather than inspecting instances.
"""

from __future__ import annotations

import types
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Tuple, Union, get_args, get_origin

from simpledb.domain.models import ID_FIELD, Record


class FieldKind(str, Enum):
    IDENTIFIER = "identifier"
    TIMESTAMP = "timestamp"
    DATE = "date"
    ENUM = "enum"
    SCALAR = "scalar"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Mapping metadata for one record field.

    Attributes
    ----------
    name : str
        Attribute name on the record.
    column : str
        Column name in SQL text and result sets (alias if set, else the name).
    annotation : Any
        Declared annotation, as pydantic resolved it.
    target : Any
        Underlying type after unwrapping Optional.
    nullable : bool
        Whether None is an allowed value.
    kind : FieldKind
        Coercion category used by the materializer.
    transient : bool
        Declared with Field(exclude=True); never projected or materialized.
    """

    name: str
    column: str
    annotation: Any
    target: Any
    nullable: bool
    kind: FieldKind
    transient: bool = False

    @property
    def is_identifier(self) -> bool:
        return self.kind is FieldKind.IDENTIFIER

    def get(self, record: Record) -> Any:
        return getattr(record, self.name)

    def set(self, record: Record, value: Any) -> None:
        setattr(record, self.name, value)


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """
    Split `Optional[X]` / `X | None` into (X, True); anything else is (annotation, False).

    Unions of several non-None members are returned as-is.
    """
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        nullable = len(members) < len(get_args(annotation))
        if len(members) == 1:
            return members[0], nullable
        return annotation, nullable
    return annotation, False


def _kind_of(name: str, target: Any) -> FieldKind:
    if name == ID_FIELD:
        return FieldKind.IDENTIFIER
    if isinstance(target, type):
        # datetime before date: datetime is a date subclass
        if issubclass(target, datetime):
            return FieldKind.TIMESTAMP
        if issubclass(target, date):
            return FieldKind.DATE
        if issubclass(target, Enum):
            return FieldKind.ENUM
    return FieldKind.SCALAR


@lru_cache(maxsize=None)
def describe(record_type: type[Record]) -> Tuple[FieldDescriptor, ...]:
    """Ordered field descriptors for `record_type`, identifier first as declared on Record."""
    descriptors = []
    for name, info in record_type.model_fields.items():
        target, nullable = unwrap_optional(info.annotation)
        descriptors.append(
            FieldDescriptor(
                name=name,
                column=info.alias or name,
                annotation=info.annotation,
                target=target,
                nullable=nullable,
                kind=_kind_of(name, target),
                transient=bool(info.exclude),
            )
        )
    return tuple(descriptors)


__all__ = [
    "FieldDescriptor",
    "FieldKind",
    "describe",
    "unwrap_optional",
]
