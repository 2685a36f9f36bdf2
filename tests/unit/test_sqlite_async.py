"""
Non-blocking API against a real SQLite file (aiosqlite session).
"""

from __future__ import annotations

from datetime import date

import pytest

from simpledb.domain.models import Person
from simpledb.errors import DatabaseConnectionError, ValidationError
from simpledb.infrastructure import sqlite
from simpledb.infrastructure.sqlite import SQLiteDatabase
from simpledb.repositories import GenericRepository
from simpledb.schema import ensure_persons_table_async


def _john() -> Person:
    return Person(first_name="John", last_name="Doe", email="john@x.com", date_of_birth=date(1980, 1, 1))


@pytest.mark.asyncio
async def test_async_walkthrough(sqlite_path):
    async with SQLiteDatabase(sqlite_path) as database:
        await ensure_persons_table_async(database)
        repository = GenericRepository(database, Person, strict_mapping=True)

        created = await repository.create_async(_john())
        assert created.id == 1

        fetched = await repository.get_by_id_async(1)
        assert fetched.model_dump() == created.model_dump()

        fetched.email = "john.updated@x.com"
        assert await repository.update_async(fetched) is True
        refreshed = await repository.get_by_id_async(1)
        assert refreshed.email == "john.updated@x.com"
        assert refreshed.updated_at is not None

        matches = await repository.find_async(
            "SELECT * FROM persons WHERE first_name LIKE :first_name", {"first_name": "J%"}
        )
        assert [p.id for p in matches] == [1]

        assert await repository.delete_async(1) is True
        assert await repository.delete_async(1) is False
        assert await repository.get_all_async() == []


@pytest.mark.asyncio
async def test_blocking_and_async_sessions_share_the_file(sqlite_db, sqlite_path):
    blocking = GenericRepository(sqlite_db, Person, strict_mapping=True)
    blocking.create(_john())

    async with SQLiteDatabase(sqlite_path) as database:
        people = await GenericRepository(database, Person).get_all_async()

    assert [p.first_name for p in people] == ["John"]


@pytest.mark.asyncio
async def test_async_create_with_explicit_id_keeps_it(sqlite_path):
    async with SQLiteDatabase(sqlite_path) as database:
        await ensure_persons_table_async(database)
        repository = GenericRepository(database, Person, strict_mapping=True)
        for _ in range(3):
            await repository.create_async(_john())
        assert await repository.delete_async(1)

        reinserted = await repository.create_async(
            Person(id=1, first_name="Back", last_name="L", email="b@x")
        )

        assert reinserted.id == 1
        assert (await repository.get_by_id_async(1)).first_name == "Back"
        assert (await repository.get_by_id_async(3)).first_name == "John"


@pytest.mark.asyncio
async def test_async_validation_issues_no_statement(sqlite_path):
    async with SQLiteDatabase(sqlite_path) as database:
        await ensure_persons_table_async(database)
        repository = GenericRepository(database, Person)

        with pytest.raises(ValidationError):
            await repository.create_async(Person(first_name="Solo"))

        assert await database.execute_scalar_async("SELECT COUNT(*) FROM persons") == 0


@pytest.mark.asyncio
async def test_async_transaction_rollback(sqlite_path):
    async with SQLiteDatabase(sqlite_path) as database:
        await ensure_persons_table_async(database)
        repository = GenericRepository(database, Person)

        with pytest.raises(RuntimeError):
            async with await database.begin_transaction_async():
                await repository.create_async(_john())
                raise RuntimeError("boom")

        assert await repository.get_all_async() == []


@pytest.mark.asyncio
async def test_async_reader_and_helpers(sqlite_path):
    async with SQLiteDatabase(sqlite_path) as database:
        await ensure_persons_table_async(database)
        await GenericRepository(database, Person).create_async(_john())

        rows = [row async for row in await database.execute_reader_async("SELECT id, email FROM persons")]

        assert rows == [{"id": 1, "email": "john@x.com"}]
        assert await sqlite.table_exists_async(database, "persons")
        assert (await sqlite.sqlite_version_async(database)).startswith("3.")
        await sqlite.vacuum_async(database)


@pytest.mark.asyncio
async def test_async_errors_are_translated(sqlite_path):
    async with SQLiteDatabase(sqlite_path) as database:
        with pytest.raises(DatabaseConnectionError):
            await database.execute_query_async("SELECT * FROM missing_table")


@pytest.mark.asyncio
async def test_async_open_failure_returns_false(tmp_path):
    database = SQLiteDatabase(str(tmp_path / "nowhere" / "x.db"))
    assert await database.open_async() is False
    assert not database.is_open_async
