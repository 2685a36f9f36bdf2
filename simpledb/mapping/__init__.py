"""
Mapping package for SimpleDB.

Field descriptors, the projector used for writes, and the materializer used for
reads. Everything here is synchronous and in-memory.
"""

from simpledb.mapping.fields import FieldDescriptor, FieldKind, describe
from simpledb.mapping.materializer import MappingDiagnostic, Materialized, materialize
from simpledb.mapping.projector import project

__all__ = [
    "FieldDescriptor",
    "FieldKind",
    "MappingDiagnostic",
    "Materialized",
    "describe",
    "materialize",
    "project",
]
