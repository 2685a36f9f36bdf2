"""
Row materializer: ResultSet -> typed records.

Each row becomes a fresh record built by the supplied zero-argument factory.
For every declared (non-transient) field whose column is present and non-NULL,
the raw value is coerced to the field's type:

1. Optional[X] is unwrapped to X.
2. datetime / date fields accept ISO-8601 text.
3. Enum fields accept the exact, case-sensitive member name.
4. Everything else goes through a plain scalar conversion. Integer fields
   reject fractional floats and decimals rather than truncating them.

Conversion failures are lenient: the field keeps its default, a WARNING is
logged, and a MappingDiagnostic is recorded so callers that need all-or-nothing
behaviour can inspect `Materialized.diagnostics` (or ask the repository for
strict mapping). Partially populated records are therefore possible.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Generic, List, Optional, TypeVar

from simpledb.domain.models import Record
from simpledb.errors import MappingError
from simpledb.infrastructure.connection import ResultSet
from simpledb.mapping.fields import FieldDescriptor, FieldKind, describe
from simpledb.utils.logging import get_logger

log = get_logger(__name__)

R = TypeVar("R", bound=Record)

_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "no", "n"})


@dataclass(frozen=True)
class MappingDiagnostic:
    """One field of one row that could not be converted."""

    row: int
    field: str
    column: str
    value: Any
    message: str
    error: Optional[MappingError] = field(default=None, repr=False, compare=False)


@dataclass
class Materialized(Generic[R]):
    records: List[R] = field(default_factory=list)
    diagnostics: List[MappingDiagnostic] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every present column mapped cleanly."""
        return not self.diagnostics


def _to_bool(descriptor: FieldDescriptor, value: Any) -> bool:
    if isinstance(value, (int, float, Decimal)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise MappingError(descriptor.name, value, bool, "not a boolean")


def _to_scalar(descriptor: FieldDescriptor, value: Any) -> Any:
    target = descriptor.target
    if not isinstance(target, type):
        # Unions, generics, Any: nothing sensible to coerce to, keep the raw value.
        return value
    if target is bool:
        return value if isinstance(value, bool) else _to_bool(descriptor, value)
    if isinstance(value, target) and not (target is int and isinstance(value, bool)):
        return value
    if target is bytes and isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if target in (int, float, str, Decimal):
        try:
            if target is Decimal and isinstance(value, float):
                return Decimal(str(value))
            converted = target(value)
        except (ValueError, TypeError, ArithmeticError) as exc:
            raise MappingError(descriptor.name, value, target, str(exc)) from exc
        if target is int and isinstance(value, (float, Decimal)) and converted != value:
            raise MappingError(descriptor.name, value, target, "would drop the fractional part")
        return converted
    raise MappingError(descriptor.name, value, target, "unsupported conversion")


def convert(descriptor: FieldDescriptor, value: Any) -> Any:
    """Coerce one raw, non-NULL column value to the descriptor's type."""
    target = descriptor.target
    if descriptor.kind is FieldKind.TIMESTAMP:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError as exc:
                raise MappingError(descriptor.name, value, target, str(exc)) from exc
        raise MappingError(descriptor.name, value, target, "not a timestamp")

    if descriptor.kind is FieldKind.DATE:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value)
            except ValueError as exc:
                raise MappingError(descriptor.name, value, target, str(exc)) from exc
        raise MappingError(descriptor.name, value, target, "not a date")

    if descriptor.kind is FieldKind.ENUM:
        if isinstance(value, target):
            return value
        if isinstance(value, str):
            try:
                return target[value]
            except KeyError:
                raise MappingError(
                    descriptor.name, value, target, f"no member named {value!r}"
                ) from None
        raise MappingError(descriptor.name, value, target, "enum members are stored by name")

    return _to_scalar(descriptor, value)


def materialize(result_set: ResultSet, factory: Callable[[], R]) -> Materialized[R]:
    """
    Build one record per row of `result_set`.

    Parameters
    ----------
    result_set : ResultSet
        Rows keyed by column name.
    factory : Callable[[], R]
        Zero-argument constructor, normally the record class itself.
    """
    out: Materialized[R] = Materialized()
    for index, row in enumerate(result_set.rows):
        record = factory()
        for descriptor in describe(type(record)):
            if descriptor.transient:
                continue
            raw = row.get(descriptor.column)
            if raw is None:
                continue
            try:
                descriptor.set(record, convert(descriptor, raw))
            except MappingError as exc:
                log.warning(
                    f"Error mapping field {descriptor.name}: {exc}",
                    extra={"row": index, "field": descriptor.name, "column": descriptor.column},
                )
                out.diagnostics.append(
                    MappingDiagnostic(
                        row=index,
                        field=descriptor.name,
                        column=descriptor.column,
                        value=raw,
                        message=str(exc),
                        error=exc,
                    )
                )
        out.records.append(record)
    return out


__all__ = ["MappingDiagnostic", "Materialized", "convert", "materialize"]
