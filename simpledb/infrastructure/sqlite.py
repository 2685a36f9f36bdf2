"""
SQLite adapter for SimpleDB.

Blocking calls go through the standard library `sqlite3` module; non-blocking
calls go through `aiosqlite`, which runs its own sqlite3 connection on a worker
thread. Both sessions are opened in autocommit mode (`isolation_level=None`) so
every statement is durable on its own unless an explicit transaction is begun.

SQLite has no native timestamp, enum, or decimal storage, so those values are
written as text: ISO-8601 for datetimes and dates, the member name for enums,
and the canonical string for decimals. The row materializer parses them back.

The module-level helpers (table_exists, vacuum, backup, ...) are maintenance
utilities layered on the same connection contract as the repository.
"""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Iterator

import aiosqlite

from simpledb.errors import DatabaseConnectionError
from simpledb.infrastructure.connection import (
    Database,
    Engine,
    Row,
    StatementOutcome,
    column_names,
)
from simpledb.utils.logging import get_logger

log = get_logger(__name__)

TABLE_EXISTS_SQL = "SELECT name FROM sqlite_master WHERE type = 'table' AND name = :table_name"
LAST_INSERT_ROWID_SQL = "SELECT last_insert_rowid()"
VERSION_SQL = "SELECT sqlite_version()"


class SQLiteDatabase(Database):
    """
    Embedded single-file engine.

    Parameters
    ----------
    path : str
        Database file path. ":memory:" works, but the blocking and non-blocking
        sessions then see two separate in-memory databases.
    """

    engine = Engine.SQLITE
    driver_errors = (sqlite3.Error,)

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path, isolation_level=None)

    async def _connect_async(self) -> aiosqlite.Connection:
        return await aiosqlite.connect(self.path, isolation_level=None)

    def _disconnect(self, handle: sqlite3.Connection) -> None:
        handle.close()

    async def _disconnect_async(self, handle: aiosqlite.Connection) -> None:
        await handle.close()

    def adapt_value(self, value: Any) -> Any:
        value = super().adapt_value(value)
        # datetime is a subclass of date; both serialize with isoformat()
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, Decimal):
            return str(value)
        return value

    def _run(self, handle: sqlite3.Connection, sql: str, params: Dict[str, Any]) -> StatementOutcome:
        cursor = handle.execute(sql, params)
        try:
            columns = column_names(cursor.description)
            rows = cursor.fetchall() if columns else []
            return StatementOutcome(columns, rows, cursor.rowcount)
        finally:
            cursor.close()

    async def _run_async(
        self, handle: aiosqlite.Connection, sql: str, params: Dict[str, Any]
    ) -> StatementOutcome:
        cursor = await handle.execute(sql, params)
        try:
            columns = column_names(cursor.description)
            rows = list(await cursor.fetchall()) if columns else []
            return StatementOutcome(columns, rows, cursor.rowcount)
        finally:
            await cursor.close()

    def _stream(self, handle: sqlite3.Connection, sql: str, params: Dict[str, Any]) -> Iterator[Row]:
        cursor = handle.execute(sql, params)
        try:
            columns = column_names(cursor.description)
            for values in cursor:
                yield dict(zip(columns, values))
        finally:
            cursor.close()

    async def _stream_async(
        self, handle: aiosqlite.Connection, sql: str, params: Dict[str, Any]
    ) -> AsyncIterator[Row]:
        cursor = await handle.execute(sql, params)
        try:
            columns = column_names(cursor.description)
            async for values in cursor:
                yield dict(zip(columns, values))
        finally:
            await cursor.close()


def create_database(path: str | Path) -> bool:
    """
    Create an empty database file.

    Returns False if the file already exists or cannot be created. A zero-byte
    file is a valid, empty SQLite database.
    """
    try:
        Path(path).touch(exist_ok=False)
    except FileExistsError:
        return False
    except OSError as exc:
        log.error("Error creating database", extra={"path": str(path), "error": str(exc)})
        return False
    return True


def table_exists(database: Database, table_name: str) -> bool:
    return database.execute_scalar(TABLE_EXISTS_SQL, {"table_name": table_name}) is not None


async def table_exists_async(database: Database, table_name: str) -> bool:
    result = await database.execute_scalar_async(TABLE_EXISTS_SQL, {"table_name": table_name})
    return result is not None


def last_insert_rowid(database: Database) -> int:
    """Rowid of the most recent successful INSERT on this session."""
    return int(database.execute_scalar(LAST_INSERT_ROWID_SQL))


async def last_insert_rowid_async(database: Database) -> int:
    return int(await database.execute_scalar_async(LAST_INSERT_ROWID_SQL))


def sqlite_version(database: Database) -> str:
    return str(database.execute_scalar(VERSION_SQL))


async def sqlite_version_async(database: Database) -> str:
    return str(await database.execute_scalar_async(VERSION_SQL))


def vacuum(database: Database) -> None:
    """Rebuild the database file to reclaim free pages."""
    database.execute_non_query("VACUUM")


async def vacuum_async(database: Database) -> None:
    await database.execute_non_query_async("VACUUM")


def backup(database: Database, backup_path: str | Path) -> bool:
    """
    Write a compacted copy of the database to `backup_path` (VACUUM INTO).

    The target must not exist yet. Returns False and logs on failure.
    """
    try:
        database.execute_non_query("VACUUM INTO :target", {"target": str(backup_path)})
    except DatabaseConnectionError as exc:
        log.error("Error backing up database", extra={"target": str(backup_path), "error": str(exc)})
        return False
    return True


async def backup_async(database: Database, backup_path: str | Path) -> bool:
    try:
        await database.execute_non_query_async("VACUUM INTO :target", {"target": str(backup_path)})
    except DatabaseConnectionError as exc:
        log.error("Error backing up database", extra={"target": str(backup_path), "error": str(exc)})
        return False
    return True


__all__ = [
    "SQLiteDatabase",
    "backup",
    "backup_async",
    "create_database",
    "last_insert_rowid",
    "last_insert_rowid_async",
    "sqlite_version",
    "sqlite_version_async",
    "table_exists",
    "table_exists_async",
    "vacuum",
    "vacuum_async",
]
