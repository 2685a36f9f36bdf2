"""
Repository and adapter behaviour against a real SQLite file (blocking API).
"""

from __future__ import annotations

from datetime import date

import pytest

from simpledb.domain.models import Person, PersonStatus
from simpledb.errors import DataAccessError, DatabaseConnectionError, ValidationError
from simpledb.infrastructure import sqlite
from simpledb.infrastructure.connection import Engine
from simpledb.infrastructure.sqlite import SQLiteDatabase
from simpledb.repositories import GenericRepository
from simpledb.schema import ensure_persons_table


def test_create_read_update_walkthrough(person_repository, john):
    created = person_repository.create(john)
    assert created.id == 1

    fetched = person_repository.get_by_id(1)
    assert fetched is not None
    assert (fetched.first_name, fetched.last_name, fetched.email) == ("John", "Doe", "john@x.com")
    assert fetched.date_of_birth == date(1980, 1, 1)
    assert fetched.updated_at is None

    fetched.email = "john.updated@x.com"
    assert person_repository.update(fetched) is True

    refreshed = person_repository.get_by_id(1)
    assert refreshed.email == "john.updated@x.com"
    assert refreshed.updated_at is not None

    everyone = person_repository.get_all()
    assert [p.id for p in everyone] == [1]

    matches = person_repository.find(
        "SELECT * FROM persons WHERE first_name LIKE :first_name", {"first_name": "J%"}
    )
    assert [p.email for p in matches] == ["john.updated@x.com"]


def test_round_trip_preserves_every_field(person_repository, john):
    john.status = PersonStatus.ARCHIVED
    person_repository.create(john)

    fetched = person_repository.get_by_id(john.id)

    assert fetched.model_dump() == john.model_dump()


def test_reads_are_idempotent(person_repository, john):
    person_repository.create(john)

    first = person_repository.get_by_id(john.id)
    second = person_repository.get_by_id(john.id)

    assert first.model_dump() == second.model_dump()


def test_identifiers_are_unique_and_increasing(person_repository):
    ids = [
        person_repository.create(Person(first_name=f"P{i}", last_name="L", email=f"p{i}@x")).id
        for i in range(3)
    ]
    assert ids == sorted(set(ids))
    assert len(ids) == 3


class UntaggedSQLiteDatabase(SQLiteDatabase):
    """SQLite without a capability tag, so identity recovery falls back to MAX(id)."""

    engine = Engine.GENERIC


@pytest.mark.parametrize("database_type", [SQLiteDatabase, UntaggedSQLiteDatabase])
def test_create_with_explicit_id_keeps_it(sqlite_path, database_type):
    with database_type(sqlite_path) as database:
        ensure_persons_table(database)
        repository = GenericRepository(database, Person, strict_mapping=True)
        for i in range(5):
            repository.create(Person(first_name=f"P{i}", last_name="L", email=f"p{i}@x"))
        assert repository.delete(2)

        reinserted = repository.create(Person(id=2, first_name="Back", last_name="L", email="b@x"))

        assert reinserted.id == 2
        assert repository.get_by_id(2).first_name == "Back"
        reinserted.email = "back@x"
        assert repository.update(reinserted)
        assert repository.get_by_id(5).first_name == "P4"
        assert repository.get_by_id(5).email == "p4@x"


def test_missing_rows_are_not_errors(person_repository):
    assert person_repository.get_by_id(404) is None
    assert person_repository.get_all() == []
    assert person_repository.find("SELECT * FROM persons WHERE email = :e", {"e": "x"}) == []


def test_delete_semantics(person_repository, john):
    person_repository.create(john)

    assert person_repository.delete(john.id) is True
    assert person_repository.get_by_id(john.id) is None
    assert person_repository.delete(john.id) is False


def test_update_of_missing_row_returns_false(person_repository, john):
    john.id = 500
    assert person_repository.update(john) is False


def test_invalid_record_never_reaches_the_table(person_repository, sqlite_db):
    with pytest.raises(ValidationError):
        person_repository.create(Person(first_name="No", last_name="Email"))
    assert sqlite_db.execute_scalar("SELECT COUNT(*) FROM persons") == 0


def test_parameter_values_are_never_executed_as_sql(person_repository, sqlite_db, john):
    person_repository.create(john)
    hostile = "x'); DROP TABLE persons; --"

    matches = person_repository.find(
        "SELECT * FROM persons WHERE first_name = :name", {"name": hostile}
    )
    person_repository.create(Person(first_name=hostile, last_name="Doe", email="e@x"))

    assert matches == []
    assert sqlite.table_exists(sqlite_db, "persons")
    stored = person_repository.find("SELECT * FROM persons WHERE first_name = :name", {"name": hostile})
    assert [p.first_name for p in stored] == [hostile]


def test_null_columns_keep_defaults(person_repository, sqlite_db):
    sqlite_db.execute_non_query(
        "INSERT INTO persons (first_name, last_name, email, status, created_at) "
        "VALUES (:f, :l, :e, :s, :c)",
        {"f": "Ann", "l": "Lee", "e": "a@x", "s": "ACTIVE", "c": "2024-01-01T00:00:00+00:00"},
    )

    (person,) = person_repository.get_all()

    assert person.date_of_birth is None
    assert person.updated_at is None


def test_strict_mapping_rejects_bad_stored_values(sqlite_db, person_repository, john):
    person_repository.create(john)
    sqlite_db.execute_non_query("UPDATE persons SET status = 'retired'")
    strict = GenericRepository(sqlite_db, Person, strict_mapping=True)

    assert person_repository.get_all()[0].status is PersonStatus.ACTIVE
    with pytest.raises(DataAccessError):
        strict.get_all()


class TestTransactions:
    def test_rollback_on_error(self, sqlite_db, person_repository, john):
        with pytest.raises(RuntimeError):
            with sqlite_db.begin_transaction():
                person_repository.create(john)
                raise RuntimeError("boom")

        assert person_repository.get_all() == []

    def test_commit_on_success(self, sqlite_db, person_repository, john):
        with sqlite_db.begin_transaction() as tx:
            person_repository.create(john)
        assert not tx.active
        assert len(person_repository.get_all()) == 1

    def test_finished_transaction_cannot_be_reused(self, sqlite_db):
        tx = sqlite_db.begin_transaction()
        tx.rollback()
        with pytest.raises(DataAccessError):
            tx.commit()


class TestAdapter:
    def test_execute_reader_streams_dict_rows(self, sqlite_db, person_repository, john):
        person_repository.create(john)

        rows = list(sqlite_db.execute_reader("SELECT id, first_name FROM persons ORDER BY id"))

        assert rows == [{"id": 1, "first_name": "John"}]

    def test_execute_query_and_scalar(self, sqlite_db):
        result = sqlite_db.execute_query("SELECT 1 AS one, 'a' AS letter")
        assert result.columns == ["one", "letter"]
        assert result.first() == {"one": 1, "letter": "a"}
        assert sqlite_db.execute_scalar("SELECT 2") == 2
        assert sqlite_db.execute_scalar("SELECT id FROM persons") is None

    def test_driver_errors_are_translated(self, sqlite_db):
        with pytest.raises(DatabaseConnectionError) as excinfo:
            sqlite_db.execute_query("SELECT * FROM no_such_table")
        assert excinfo.value.__cause__ is not None

    def test_open_failure_returns_false(self, tmp_path):
        database = SQLiteDatabase(str(tmp_path / "missing-dir" / "x.db"))

        assert database.open() is False
        with pytest.raises(DatabaseConnectionError):
            database.execute_scalar("SELECT 1")

    def test_close_is_idempotent(self, sqlite_path):
        database = SQLiteDatabase(sqlite_path)
        assert database.open()
        database.close()
        database.close()
        assert not database.is_open


class TestHelpers:
    def test_create_database(self, tmp_path):
        target = tmp_path / "new.db"
        assert sqlite.create_database(target) is True
        assert target.exists()
        assert sqlite.create_database(target) is False

    def test_table_exists(self, sqlite_db):
        assert sqlite.table_exists(sqlite_db, "persons")
        assert not sqlite.table_exists(sqlite_db, "ghosts")

    def test_version_and_vacuum(self, sqlite_db):
        assert sqlite.sqlite_version(sqlite_db).startswith("3.")
        sqlite.vacuum(sqlite_db)

    def test_backup_copies_rows(self, sqlite_db, person_repository, john, tmp_path):
        person_repository.create(john)
        target = tmp_path / "copy.db"

        assert sqlite.backup(sqlite_db, target) is True
        assert sqlite.backup(sqlite_db, target) is False

        with SQLiteDatabase(str(target)) as copy:
            restored = GenericRepository(copy, Person, strict_mapping=True).get_all()
        assert [p.email for p in restored] == ["john@x.com"]
