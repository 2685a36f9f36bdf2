"""
Infrastructure package for SimpleDB.

Centralizes database connectivity concerns: the connection contract, the SQLite
and PostgreSQL adapters, and the factory that builds them. Keep this layer
focused on I/O and resource management, decoupled from record mapping.
"""

from simpledb.infrastructure.connection import (
    AsyncTransaction,
    Database,
    Engine,
    ResultSet,
    Transaction,
)
from simpledb.infrastructure.db_factory import (
    DatabaseType,
    build_dsn,
    create_database,
    create_postgres_database,
    create_sqlite_database,
    database_from_settings,
)
from simpledb.infrastructure.postgres import PostgresDatabase
from simpledb.infrastructure.sqlite import SQLiteDatabase

__all__ = [
    "AsyncTransaction",
    "Database",
    "DatabaseType",
    "Engine",
    "PostgresDatabase",
    "ResultSet",
    "SQLiteDatabase",
    "Transaction",
    "build_dsn",
    "create_database",
    "create_postgres_database",
    "create_sqlite_database",
    "database_from_settings",
]
