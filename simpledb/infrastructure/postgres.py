"""
PostgreSQL adapter for SimpleDB.

Uses psycopg 3 for both execution modes: `psycopg.Connection` for blocking
calls and `psycopg.AsyncConnection` for non-blocking calls. Sessions run in
autocommit mode; explicit transactions are driven with BEGIN/COMMIT/ROLLBACK
through the shared Transaction handles.

Statements arrive with `:name` placeholders and are rewritten to psycopg's
`%(name)s` style before execution. Connecting retries transient failures with
tenacity; statement execution never retries.
"""

from __future__ import annotations

import re
from typing import Any, AsyncIterator, Dict, Iterator, Optional, Tuple

import psycopg
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from simpledb.infrastructure.connection import (
    Database,
    Engine,
    Parameters,
    Row,
    StatementOutcome,
    column_names,
    validate_identifier,
)
from simpledb.utils.logging import get_logger

log = get_logger(__name__)

TABLE_EXISTS_SQL = (
    "SELECT COUNT(*) FROM information_schema.tables "
    "WHERE table_schema = current_schema() AND table_name = :table_name"
)
LAST_INSERT_ID_SQL = "SELECT lastval()"
VERSION_SQL = "SELECT version()"
DATABASE_NAME_SQL = "SELECT current_database()"
TABLE_SIZE_SQL = "SELECT pg_total_relation_size(to_regclass(:table_name))"

# Text that is copied through untouched (apart from % escaping): escape strings,
# standard strings, quoted identifiers, dollar-quoted bodies, and comments.
# "::" casts are not placeholders.
_PLACEHOLDER_RE = re.compile(
    r"""
    (?P<verbatim>
        (?<![A-Za-z0-9_])[Ee]'(?:[^'\\]|\\.|'')*'
      | '(?:[^']|'')*'
      | "(?:[^"]|"")*"
      | \$(?P<tag>[A-Za-z_][A-Za-z0-9_]*|)\$.*?\$(?P=tag)\$
      | --[^\n]*
      | /\*.*?\*/
    )
    | (?P<cast>::)
    | :(?P<name>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<percent>%)
    """,
    re.VERBOSE | re.DOTALL,
)


def translate_placeholders(sql: str) -> str:
    """
    Rewrite `:name` placeholders as `%(name)s` and escape literal `%` as `%%`.

    A `:name` inside a string, quoted identifier, `$tag$` body, or comment is
    left alone. Only needed when parameters are passed; psycopg leaves the
    query text alone otherwise.
    """

    def _replace(match: re.Match) -> str:
        verbatim = match.group("verbatim")
        if verbatim is not None:
            return verbatim.replace("%", "%%")
        if match.group("cast"):
            return "::"
        if match.group("name"):
            return f"%({match.group('name')})s"
        return "%%"

    return _PLACEHOLDER_RE.sub(_replace, sql)


class PostgresDatabase(Database):
    """
    Client/server engine backed by psycopg.

    Parameters
    ----------
    conninfo : str
        libpq connection string or postgresql:// URL.
    connect_timeout : int, optional
        Seconds to wait for the server before a connection attempt fails.
    """

    engine = Engine.POSTGRES
    driver_errors = (psycopg.Error,)

    def __init__(self, conninfo: str, connect_timeout: Optional[int] = None) -> None:
        super().__init__(conninfo)
        self.connect_timeout = connect_timeout

    def _connect_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"autocommit": True}
        if self.connect_timeout:
            kwargs["connect_timeout"] = self.connect_timeout
        return kwargs

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(psycopg.OperationalError),
        reraise=True,
    )
    def _connect(self) -> psycopg.Connection:
        return psycopg.connect(self.connection_string, **self._connect_kwargs())

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(psycopg.OperationalError),
        reraise=True,
    )
    async def _connect_async(self) -> psycopg.AsyncConnection:
        return await psycopg.AsyncConnection.connect(
            self.connection_string, **self._connect_kwargs()
        )

    def _disconnect(self, handle: psycopg.Connection) -> None:
        handle.close()

    async def _disconnect_async(self, handle: psycopg.AsyncConnection) -> None:
        await handle.close()

    def prepare(self, sql: str, parameters: Parameters) -> Tuple[str, Dict[str, Any]]:
        query, params = super().prepare(sql, parameters)
        if not params:
            return query, params
        return translate_placeholders(query), params

    def _run(self, handle: psycopg.Connection, sql: str, params: Dict[str, Any]) -> StatementOutcome:
        with handle.cursor() as cur:
            cur.execute(sql, params or None)
            columns = column_names(cur.description)
            rows = cur.fetchall() if columns else []
            return StatementOutcome(columns, rows, cur.rowcount)

    async def _run_async(
        self, handle: psycopg.AsyncConnection, sql: str, params: Dict[str, Any]
    ) -> StatementOutcome:
        async with handle.cursor() as cur:
            await cur.execute(sql, params or None)
            columns = column_names(cur.description)
            rows = await cur.fetchall() if columns else []
            return StatementOutcome(columns, rows, cur.rowcount)

    def _stream(self, handle: psycopg.Connection, sql: str, params: Dict[str, Any]) -> Iterator[Row]:
        with handle.cursor() as cur:
            cur.execute(sql, params or None)
            columns = column_names(cur.description)
            for values in cur:
                yield dict(zip(columns, values))

    async def _stream_async(
        self, handle: psycopg.AsyncConnection, sql: str, params: Dict[str, Any]
    ) -> AsyncIterator[Row]:
        async with handle.cursor() as cur:
            await cur.execute(sql, params or None)
            columns = column_names(cur.description)
            async for values in cur:
                yield dict(zip(columns, values))


def table_exists(database: Database, table_name: str) -> bool:
    return int(database.execute_scalar(TABLE_EXISTS_SQL, {"table_name": table_name})) > 0


async def table_exists_async(database: Database, table_name: str) -> bool:
    result = await database.execute_scalar_async(TABLE_EXISTS_SQL, {"table_name": table_name})
    return int(result) > 0


def last_insert_id(database: Database) -> int:
    """Value most recently produced by a sequence in this session (lastval())."""
    return int(database.execute_scalar(LAST_INSERT_ID_SQL))


async def last_insert_id_async(database: Database) -> int:
    return int(await database.execute_scalar_async(LAST_INSERT_ID_SQL))


def server_version(database: Database) -> str:
    return str(database.execute_scalar(VERSION_SQL))


async def server_version_async(database: Database) -> str:
    return str(await database.execute_scalar_async(VERSION_SQL))


def database_name(database: Database) -> str:
    return str(database.execute_scalar(DATABASE_NAME_SQL))


async def database_name_async(database: Database) -> str:
    return str(await database.execute_scalar_async(DATABASE_NAME_SQL))


def table_size(database: Database, table_name: str) -> int:
    """Total on-disk size of a table in bytes, including indexes and TOAST. 0 if missing."""
    result = database.execute_scalar(TABLE_SIZE_SQL, {"table_name": table_name})
    return int(result or 0)


async def table_size_async(database: Database, table_name: str) -> int:
    result = await database.execute_scalar_async(TABLE_SIZE_SQL, {"table_name": table_name})
    return int(result or 0)


def analyze_table(database: Database, table_name: str) -> None:
    """
    Refresh planner statistics for one table.

    Maintenance helper: ANALYZE cannot take a bound identifier, so the table
    name is validated and interpolated.
    """
    database.execute_non_query(f"ANALYZE {validate_identifier(table_name)}")


async def analyze_table_async(database: Database, table_name: str) -> None:
    await database.execute_non_query_async(f"ANALYZE {validate_identifier(table_name)}")


__all__ = [
    "PostgresDatabase",
    "analyze_table",
    "analyze_table_async",
    "database_name",
    "database_name_async",
    "last_insert_id",
    "last_insert_id_async",
    "server_version",
    "server_version_async",
    "table_exists",
    "table_exists_async",
    "table_size",
    "table_size_async",
    "translate_placeholders",
]
