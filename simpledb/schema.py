"""
Demo schema for the `persons` table.

Not a migration tool: one CREATE TABLE per engine, used by the CLI demo and the
test suite.
"""

from __future__ import annotations

from typing import Dict

from simpledb.infrastructure.connection import Database, Engine

PERSONS_DDL: Dict[Engine, str] = {
    Engine.SQLITE: """
        CREATE TABLE IF NOT EXISTS persons (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            email TEXT NOT NULL,
            date_of_birth TEXT,
            status TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT
        )
    """,
    Engine.POSTGRES: """
        CREATE TABLE IF NOT EXISTS persons (
            id BIGSERIAL PRIMARY KEY,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            email TEXT NOT NULL,
            date_of_birth DATE,
            status TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL,
            updated_at TIMESTAMPTZ
        )
    """,
}


def persons_ddl(engine: Engine) -> str:
    try:
        return PERSONS_DDL[engine]
    except KeyError:
        raise ValueError(f"No persons schema for engine '{engine}'") from None


def ensure_persons_table(database: Database) -> None:
    database.execute_non_query(persons_ddl(database.engine))


async def ensure_persons_table_async(database: Database) -> None:
    await database.execute_non_query_async(persons_ddl(database.engine))


__all__ = ["PERSONS_DDL", "ensure_persons_table", "ensure_persons_table_async", "persons_ddl"]
