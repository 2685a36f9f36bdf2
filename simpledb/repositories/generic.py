"""
Generic repository: CRUD for any Record subclass over any Database adapter.

SQL is built from the record type's field descriptors with `:name` placeholders
for every value; values are always bound, never formatted into the text. The
blocking and non-blocking variants of each operation share the same
`_prepare_*` step and differ only in how the statement is dispatched, so their
validation, argument checks, and results are identical.

The repository borrows the database for its lifetime and never closes it.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, Type

from simpledb.config import get_settings
from simpledb.domain.models import ID_FIELD, UNASSIGNED_ID, utc_now
from simpledb.errors import InvalidArgumentError, MappingError, ValidationError
from simpledb.infrastructure.connection import Database, ResultSet, validate_identifier
from simpledb.mapping.materializer import Materialized, materialize
from simpledb.mapping.projector import project
from simpledb.repositories.abstract import AbstractRepository, R
from simpledb.repositories.engine_selector import recover_identity, recover_identity_async
from simpledb.utils.logging import get_logger

log = get_logger(__name__)


class GenericRepository(AbstractRepository[R], Generic[R]):
    """
    Repository for one record type bound to one database.

    Parameters
    ----------
    database : Database
        Connection adapter; borrowed, not owned.
    record_type : type[R]
        Record class; also used as the zero-argument factory for reads.
    strict_mapping : bool, optional
        Raise MappingError when any column fails to convert instead of returning
        partially populated records. Defaults to settings.strict_mapping.
    """

    def __init__(
        self,
        database: Database,
        record_type: Type[R],
        strict_mapping: Optional[bool] = None,
    ) -> None:
        self._database = database
        self._record_type = record_type
        self._table_name = validate_identifier(record_type.get_table_name())
        self.strict_mapping = (
            get_settings().strict_mapping if strict_mapping is None else strict_mapping
        )

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def record_type(self) -> Type[R]:
        return self._record_type

    # -- statement preparation ---------------------------------------------

    def _select_all_sql(self) -> str:
        return f"SELECT * FROM {self._table_name}"

    def _prepare_get_by_id(self, record_id: int) -> Tuple[str, Dict[str, Any]]:
        sql = f"SELECT * FROM {self._table_name} WHERE {ID_FIELD} = :{ID_FIELD}"
        return sql, {ID_FIELD: record_id}

    def _check_valid(self, record: R) -> None:
        if not record.validate():
            raise ValidationError(record, f"{type(record).__name__} validation failed.")

    def _prepare_insert(self, record: R) -> Tuple[str, Dict[str, Any]]:
        self._check_valid(record)
        columns = project(record)
        column_list = ", ".join(columns)
        placeholders = ", ".join(f":{name}" for name in columns)
        sql = f"INSERT INTO {self._table_name} ({column_list}) VALUES ({placeholders})"
        return sql, columns

    def _prepare_update(self, record: R) -> Tuple[str, Dict[str, Any]]:
        self._check_valid(record)
        if record.id <= 0:
            raise InvalidArgumentError("Record id must be greater than zero.")
        record.updated_at = utc_now()
        columns = project(record)
        set_clause = ", ".join(f"{name} = :{name}" for name in columns if name != ID_FIELD)
        sql = f"UPDATE {self._table_name} SET {set_clause} WHERE {ID_FIELD} = :{ID_FIELD}"
        return sql, columns

    def _prepare_delete(self, record_id: int) -> Tuple[str, Dict[str, Any]]:
        if record_id <= 0:
            raise InvalidArgumentError("Id must be greater than zero.")
        sql = f"DELETE FROM {self._table_name} WHERE {ID_FIELD} = :{ID_FIELD}"
        return sql, {ID_FIELD: record_id}

    def _records(self, result_set: ResultSet) -> List[R]:
        mapped: Materialized[R] = materialize(result_set, self._record_type)
        if mapped.diagnostics:
            if self.strict_mapping:
                first = mapped.diagnostics[0]
                if first.error is not None:
                    raise first.error
                raise MappingError(first.field, first.value, self._record_type, first.message)
            log.warning(
                f"{len(mapped.diagnostics)} field(s) of {self._table_name} left at defaults",
                extra={"table": self._table_name, "diagnostics": len(mapped.diagnostics)},
            )
        return mapped.records

    # -- reads ----------------------------------------------------------------

    def get_all(self) -> List[R]:
        return self._records(self._database.execute_query(self._select_all_sql()))

    async def get_all_async(self) -> List[R]:
        return self._records(await self._database.execute_query_async(self._select_all_sql()))

    def get_by_id(self, record_id: int) -> Optional[R]:
        sql, params = self._prepare_get_by_id(record_id)
        records = self._records(self._database.execute_query(sql, params))
        return records[0] if records else None

    async def get_by_id_async(self, record_id: int) -> Optional[R]:
        sql, params = self._prepare_get_by_id(record_id)
        records = self._records(await self._database.execute_query_async(sql, params))
        return records[0] if records else None

    def find(self, query: str, parameters: Optional[Mapping[str, Any]] = None) -> List[R]:
        """Run caller SQL with `:name` placeholders bound from `parameters`."""
        return self._records(self._database.execute_query(query, parameters))

    async def find_async(
        self, query: str, parameters: Optional[Mapping[str, Any]] = None
    ) -> List[R]:
        return self._records(await self._database.execute_query_async(query, parameters))

    # -- writes ---------------------------------------------------------------

    def create(self, record: R) -> R:
        """
        Insert `record` and return it.

        An unassigned id (0) is filled in from the engine after the INSERT; a
        caller-supplied positive id is inserted as-is and left untouched.
        """
        generated = record.id == UNASSIGNED_ID
        sql, params = self._prepare_insert(record)
        self._database.execute_non_query(sql, params)
        if generated:
            record.id = recover_identity(self._database, self._table_name)
        log.debug("Record created", extra={"table": self._table_name, "id": record.id})
        return record

    async def create_async(self, record: R) -> R:
        generated = record.id == UNASSIGNED_ID
        sql, params = self._prepare_insert(record)
        await self._database.execute_non_query_async(sql, params)
        if generated:
            record.id = await recover_identity_async(self._database, self._table_name)
        log.debug("Record created", extra={"table": self._table_name, "id": record.id})
        return record

    def update(self, record: R) -> bool:
        sql, params = self._prepare_update(record)
        return self._database.execute_non_query(sql, params) > 0

    async def update_async(self, record: R) -> bool:
        sql, params = self._prepare_update(record)
        return await self._database.execute_non_query_async(sql, params) > 0

    def delete(self, record_id: int) -> bool:
        sql, params = self._prepare_delete(record_id)
        return self._database.execute_non_query(sql, params) > 0

    async def delete_async(self, record_id: int) -> bool:
        sql, params = self._prepare_delete(record_id)
        return await self._database.execute_non_query_async(sql, params) > 0


__all__ = ["GenericRepository"]
