"""
Database factory utilities for SimpleDB.

Centralizes construction of engine adapters so callers pick an engine by name
(or from settings) without importing driver modules themselves. Factories only
build adapters; sessions are opened lazily by the adapter on first use.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from simpledb.config import Settings, get_settings
from simpledb.infrastructure.connection import Database
from simpledb.infrastructure.postgres import PostgresDatabase
from simpledb.infrastructure.sqlite import SQLiteDatabase


class DatabaseType(str, Enum):
    SQLITE = "sqlite"
    POSTGRES = "postgres"


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def create_database(db_type: DatabaseType | str, connection_string: str) -> Database:
    """
    Create an adapter for the given engine.

    Parameters
    ----------
    db_type : DatabaseType | str
        Engine name ("sqlite" or "postgres").
    connection_string : str
        File path for SQLite, DSN/conninfo for PostgreSQL.

    Raises
    ------
    ValueError
        If the engine is not supported.
    """
    try:
        kind = DatabaseType(db_type)
    except ValueError:
        supported = ", ".join(member.value for member in DatabaseType)
        raise ValueError(f"Database type '{db_type}' is not supported. Available: {supported}") from None

    if kind is DatabaseType.SQLITE:
        return SQLiteDatabase(connection_string)
    return PostgresDatabase(connection_string)


def create_sqlite_database(database_path: str) -> SQLiteDatabase:
    return SQLiteDatabase(database_path)


def create_postgres_database(
    host: str,
    database: str,
    user: str,
    password: str,
    port: int = 5432,
    connect_timeout: Optional[int] = None,
) -> PostgresDatabase:
    dsn = f"postgresql://{user}:{password}@{host}:{port}/{database}"
    return PostgresDatabase(dsn, connect_timeout=connect_timeout)


def database_from_settings(
    db_type: DatabaseType | str, settings: Optional[Settings] = None
) -> Database:
    """Build an adapter for `db_type` using connection values from settings."""
    settings = settings or get_settings()
    if DatabaseType(db_type) is DatabaseType.SQLITE:
        return SQLiteDatabase(settings.sqlite_path)
    return PostgresDatabase(build_dsn(settings), connect_timeout=settings.db_connect_timeout_s)


__all__ = [
    "DatabaseType",
    "build_dsn",
    "create_database",
    "create_postgres_database",
    "create_sqlite_database",
    "database_from_settings",
]
