"""
Connection contract shared by every SimpleDB engine adapter.

A `Database` owns at most two driver sessions: a blocking one used by the plain
methods and a non-blocking one used by the `*_async` methods. Each is opened
lazily on first use and stays open until `close()` / `close_async()`.

Subclasses only implement the driver hooks (`_connect`, `_run`, `_stream`, ...).
Parameter adaptation, error translation, logging, and the result-set shape live
here so both engines behave identically from the repository's point of view.

Statements use `:name` placeholders and a mapping of bind names (without the
prefix) to values. `None` is always bound as SQL NULL.
"""

from __future__ import annotations

import abc
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    AsyncIterator,
    Dict,
    Generator,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
)

from simpledb.errors import DataAccessError, DatabaseConnectionError, InvalidArgumentError
from simpledb.utils.logging import get_logger

log = get_logger(__name__)

Row = Dict[str, Any]
Parameters = Optional[Mapping[str, Any]]

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class Engine(str, Enum):
    """Capability tag each adapter exposes so callers can pick engine-specific primitives."""

    SQLITE = "sqlite"
    POSTGRES = "postgres"
    GENERIC = "generic"


def validate_identifier(name: str) -> str:
    """
    Return `name` unchanged if it is a plain (optionally schema-qualified) SQL identifier.

    Identifiers cannot be bound as parameters, so anything interpolated into SQL
    text must pass through here first.
    """
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise InvalidArgumentError(f"Invalid SQL identifier: {name!r}")
    return name


@dataclass
class ResultSet:
    """
    Backend-neutral tabular result.

    Rows are dicts keyed by the exact (case-sensitive) column names reported by
    the driver, in column order.
    """

    columns: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)

    @classmethod
    def from_tuples(cls, columns: Sequence[str], tuples: Sequence[Sequence[Any]]) -> "ResultSet":
        names = list(columns)
        return cls(columns=names, rows=[dict(zip(names, values)) for values in tuples])

    def first(self) -> Optional[Row]:
        return self.rows[0] if self.rows else None

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)


class StatementOutcome(NamedTuple):
    """What a driver hook reports back after running one statement."""

    columns: List[str]
    rows: List[Tuple[Any, ...]]
    rowcount: int


def column_names(description: Optional[Sequence[Sequence[Any]]]) -> List[str]:
    """Extract column names from a DB-API cursor description."""
    if not description:
        return []
    return [column[0] for column in description]


class Transaction:
    """
    Handle for an explicit transaction on the blocking session.

    Used as a context manager it commits on success and rolls back on error.
    """

    def __init__(self, database: "Database") -> None:
        self._database = database
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def commit(self) -> None:
        self._finish("COMMIT")

    def rollback(self) -> None:
        self._finish("ROLLBACK")

    def _finish(self, statement: str) -> None:
        if not self._active:
            raise DataAccessError("Transaction is already finished.")
        self._active = False
        self._database.execute_non_query(statement)

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._active:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        return False


class AsyncTransaction:
    """Non-blocking counterpart of Transaction, bound to the async session."""

    def __init__(self, database: "Database") -> None:
        self._database = database
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    async def commit(self) -> None:
        await self._finish("COMMIT")

    async def rollback(self) -> None:
        await self._finish("ROLLBACK")

    async def _finish(self, statement: str) -> None:
        if not self._active:
            raise DataAccessError("Transaction is already finished.")
        self._active = False
        await self._database.execute_non_query_async(statement)

    async def __aenter__(self) -> "AsyncTransaction":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if self._active:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        return False


class Database(abc.ABC):
    """
    Connection contract every storage engine adapter implements.

    Attributes
    ----------
    engine : Engine
        Capability tag used by the engine selector for identity recovery.
    driver_errors : tuple[type[BaseException], ...]
        Driver exception types translated into DatabaseConnectionError.
    """

    engine: Engine = Engine.GENERIC
    driver_errors: Tuple[type, ...] = ()

    def __init__(self, connection_string: str) -> None:
        self.connection_string = connection_string
        self._conn: Any = None
        self._aconn: Any = None

    # -- driver hooks -----------------------------------------------------

    @abc.abstractmethod
    def _connect(self) -> Any:  # pragma: no cover - interface only
        """Open and return a blocking driver session."""
        raise NotImplementedError

    @abc.abstractmethod
    async def _connect_async(self) -> Any:  # pragma: no cover - interface only
        """Open and return a non-blocking driver session."""
        raise NotImplementedError

    @abc.abstractmethod
    def _disconnect(self, handle: Any) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def _disconnect_async(self, handle: Any) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def _run(self, handle: Any, sql: str, params: Dict[str, Any]) -> StatementOutcome:
        """Execute one statement and fully fetch its rows."""
        raise NotImplementedError  # pragma: no cover - interface only

    @abc.abstractmethod
    async def _run_async(
        self, handle: Any, sql: str, params: Dict[str, Any]
    ) -> StatementOutcome:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def _stream(
        self, handle: Any, sql: str, params: Dict[str, Any]
    ) -> Iterator[Row]:  # pragma: no cover - interface only
        """Yield rows one at a time from an open cursor."""
        raise NotImplementedError

    @abc.abstractmethod
    def _stream_async(
        self, handle: Any, sql: str, params: Dict[str, Any]
    ) -> AsyncIterator[Row]:  # pragma: no cover - interface only
        raise NotImplementedError

    # -- parameter handling -----------------------------------------------

    def adapt_value(self, value: Any) -> Any:
        """Convert a Python value into something the driver can bind."""
        if isinstance(value, Enum):
            return value.name
        return value

    def prepare(self, sql: str, parameters: Parameters) -> Tuple[str, Dict[str, Any]]:
        """Return the driver-ready SQL text and bound parameters."""
        params = {name: self.adapt_value(value) for name, value in (parameters or {}).items()}
        return sql, params

    @contextmanager
    def _translate_errors(self, sql: str) -> Generator[None, None, None]:
        try:
            yield
        except self.driver_errors as exc:
            log.debug(
                "Statement failed",
                extra={"engine": self.engine.value, "sql": sql, "error": str(exc)},
            )
            raise DatabaseConnectionError(
                f"{self.engine.value} statement failed: {exc}"
            ) from exc

    # -- lifecycle ----------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def is_open_async(self) -> bool:
        return self._aconn is not None

    def open(self) -> bool:
        """Open the blocking session. Returns False (and logs) instead of raising."""
        if self._conn is not None:
            return True
        try:
            self._conn = self._connect()
        except self.driver_errors as exc:
            log.error(
                "Error opening connection",
                extra={"engine": self.engine.value, "error": str(exc)},
            )
            return False
        log.debug("Connection opened", extra={"engine": self.engine.value})
        return True

    async def open_async(self) -> bool:
        """Open the non-blocking session. Returns False (and logs) instead of raising."""
        if self._aconn is not None:
            return True
        try:
            self._aconn = await self._connect_async()
        except self.driver_errors as exc:
            log.error(
                "Error opening connection",
                extra={"engine": self.engine.value, "error": str(exc)},
            )
            return False
        log.debug("Async connection opened", extra={"engine": self.engine.value})
        return True

    def close(self) -> None:
        if self._conn is not None:
            handle, self._conn = self._conn, None
            self._disconnect(handle)

    async def close_async(self) -> None:
        if self._aconn is not None:
            handle, self._aconn = self._aconn, None
            await self._disconnect_async(handle)

    def _session(self) -> Any:
        if self._conn is None and not self.open():
            raise DatabaseConnectionError(f"Could not open {self.engine.value} connection.")
        return self._conn

    async def _session_async(self) -> Any:
        if self._aconn is None and not await self.open_async():
            raise DatabaseConnectionError(f"Could not open {self.engine.value} connection.")
        return self._aconn

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close_async()
        self.close()

    # -- transactions -------------------------------------------------------

    def begin_transaction(self) -> Transaction:
        self.execute_non_query("BEGIN")
        return Transaction(self)

    async def begin_transaction_async(self) -> AsyncTransaction:
        await self.execute_non_query_async("BEGIN")
        return AsyncTransaction(self)

    # -- execution ----------------------------------------------------------

    def _execute(self, sql: str, parameters: Parameters) -> StatementOutcome:
        handle = self._session()
        query, params = self.prepare(sql, parameters)
        log.debug("Executing statement", extra={"engine": self.engine.value, "sql": query})
        with self._translate_errors(query):
            return self._run(handle, query, params)

    async def _execute_async(self, sql: str, parameters: Parameters) -> StatementOutcome:
        handle = await self._session_async()
        query, params = self.prepare(sql, parameters)
        log.debug("Executing statement", extra={"engine": self.engine.value, "sql": query})
        with self._translate_errors(query):
            return await self._run_async(handle, query, params)

    def execute_non_query(self, sql: str, parameters: Parameters = None) -> int:
        """Run a statement and return the number of affected rows."""
        return self._execute(sql, parameters).rowcount

    async def execute_non_query_async(self, sql: str, parameters: Parameters = None) -> int:
        return (await self._execute_async(sql, parameters)).rowcount

    def execute_scalar(self, sql: str, parameters: Parameters = None) -> Any:
        """Return the first column of the first row, or None for an empty result."""
        outcome = self._execute(sql, parameters)
        return outcome.rows[0][0] if outcome.rows and outcome.rows[0] else None

    async def execute_scalar_async(self, sql: str, parameters: Parameters = None) -> Any:
        outcome = await self._execute_async(sql, parameters)
        return outcome.rows[0][0] if outcome.rows and outcome.rows[0] else None

    def execute_query(self, sql: str, parameters: Parameters = None) -> ResultSet:
        outcome = self._execute(sql, parameters)
        return ResultSet.from_tuples(outcome.columns, outcome.rows)

    async def execute_query_async(self, sql: str, parameters: Parameters = None) -> ResultSet:
        outcome = await self._execute_async(sql, parameters)
        return ResultSet.from_tuples(outcome.columns, outcome.rows)

    def execute_reader(self, sql: str, parameters: Parameters = None) -> Iterator[Row]:
        """
        Return an iterator over rows read straight from the cursor.

        The statement runs when iteration starts; exhausting or closing the
        iterator releases the cursor.
        """
        handle = self._session()
        query, params = self.prepare(sql, parameters)
        return self._guarded_stream(handle, query, params)

    async def execute_reader_async(
        self, sql: str, parameters: Parameters = None
    ) -> AsyncIterator[Row]:
        handle = await self._session_async()
        query, params = self.prepare(sql, parameters)
        return self._guarded_stream_async(handle, query, params)

    def _guarded_stream(self, handle: Any, sql: str, params: Dict[str, Any]) -> Iterator[Row]:
        log.debug("Streaming statement", extra={"engine": self.engine.value, "sql": sql})
        with self._translate_errors(sql):
            yield from self._stream(handle, sql, params)

    async def _guarded_stream_async(
        self, handle: Any, sql: str, params: Dict[str, Any]
    ) -> AsyncIterator[Row]:
        log.debug("Streaming statement", extra={"engine": self.engine.value, "sql": sql})
        with self._translate_errors(sql):
            async for row in self._stream_async(handle, sql, params):
                yield row


__all__ = [
    "AsyncTransaction",
    "Database",
    "Engine",
    "Parameters",
    "ResultSet",
    "Row",
    "StatementOutcome",
    "Transaction",
    "column_names",
    "validate_identifier",
]
