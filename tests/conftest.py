"""
Pytest configuration for SimpleDB.

Provides fixtures for:
- Settings and DSN for PostgreSQL integration tests
- File-backed SQLite databases with the persons schema
- A recording fake Database for asserting exactly which statements were issued
"""

from __future__ import annotations

import os
from datetime import date
from typing import Generator

import pytest

from simpledb.config import Settings
from simpledb.domain.models import Person
from simpledb.infrastructure.db_factory import build_dsn
from simpledb.infrastructure.postgres import PostgresDatabase
from simpledb.infrastructure.sqlite import SQLiteDatabase
from simpledb.repositories.generic import GenericRepository
from simpledb.schema import ensure_persons_table
from tests.fakes import RecordingDatabase


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "simpledb"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


@pytest.fixture(scope="function")
def pg_database(test_dsn: str) -> Generator[PostgresDatabase, None, None]:
    """
    PostgreSQL adapter with a freshly created persons table.

    Skips tests if the database is not reachable.
    """
    database = PostgresDatabase(test_dsn, connect_timeout=5)
    if not database.open():
        pytest.skip("Database not available for integration tests")
    database.execute_non_query("DROP TABLE IF EXISTS persons")
    ensure_persons_table(database)
    try:
        yield database
    finally:
        database.execute_non_query("DROP TABLE IF EXISTS persons")
        database.close()


@pytest.fixture
def sqlite_path(tmp_path) -> str:
    return str(tmp_path / "simpledb-test.db")


@pytest.fixture
def sqlite_db(sqlite_path: str) -> Generator[SQLiteDatabase, None, None]:
    """
    Blocking SQLite adapter on a temporary file with the persons table created.
    """
    database = SQLiteDatabase(sqlite_path)
    ensure_persons_table(database)
    try:
        yield database
    finally:
        database.close()


@pytest.fixture
def person_repository(sqlite_db: SQLiteDatabase) -> GenericRepository[Person]:
    return GenericRepository(sqlite_db, Person, strict_mapping=False)


@pytest.fixture
def recording_db() -> RecordingDatabase:
    return RecordingDatabase()


@pytest.fixture
def john() -> Person:
    return Person(
        first_name="John",
        last_name="Doe",
        email="john@x.com",
        date_of_birth=date(1980, 1, 1),
    )
