"""
Domain package for SimpleDB.

Exports the record base class and the sample records used by the demo and tests.
Keep this package focused on data definitions and validation concerns.
"""

from simpledb.domain.models import ID_FIELD, UNASSIGNED_ID, Person, PersonStatus, Record

__all__ = [
    "ID_FIELD",
    "UNASSIGNED_ID",
    "Person",
    "PersonStatus",
    "Record",
]
