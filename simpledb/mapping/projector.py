"""
Field projector: record instance -> ordered column/value mapping.

The result drives INSERT column lists, UPDATE SET clauses, and the bound
parameter names, so its order is the record type's declared field order on
every call. Projection only reads the record; validation is the caller's job.
"""

from __future__ import annotations

from typing import Any, Dict

from simpledb.domain.models import UNASSIGNED_ID, Record
from simpledb.mapping.fields import describe


def project(record: Record) -> Dict[str, Any]:
    """
    Return `{column: value}` for every non-transient field of `record`.

    The identifier is left out while it is still unassigned (0) so the engine
    can generate it.
    """
    columns: Dict[str, Any] = {}
    for descriptor in describe(type(record)):
        if descriptor.transient:
            continue
        value = descriptor.get(record)
        if descriptor.is_identifier and value == UNASSIGNED_ID:
            continue
        columns[descriptor.column] = value
    return columns


__all__ = ["project"]
