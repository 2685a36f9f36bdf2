from __future__ import annotations

import pytest

from simpledb.errors import InvalidArgumentError
from simpledb.infrastructure.connection import Engine, StatementOutcome
from simpledb.repositories import engine_selector
from simpledb.repositories.engine_selector import (
    identity_strategy,
    recover_identity,
    recover_identity_async,
    register_identity_strategy,
)

from tests.fakes import RecordingDatabase


class SQLiteTagged(RecordingDatabase):
    engine = Engine.SQLITE


class PostgresTagged(RecordingDatabase):
    engine = Engine.POSTGRES


@pytest.mark.parametrize(
    "database_type, expected_sql",
    [
        (SQLiteTagged, "SELECT last_insert_rowid()"),
        (PostgresTagged, "SELECT lastval()"),
        (RecordingDatabase, "SELECT MAX(id) FROM persons"),
    ],
)
def test_dispatch_by_capability_tag(database_type, expected_sql):
    database = database_type([StatementOutcome(["v"], [(12,)], 1)])

    assert recover_identity(database, "persons") == 12
    assert database.statements == [(expected_sql, {})]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "database_type, expected_sql",
    [
        (SQLiteTagged, "SELECT last_insert_rowid()"),
        (PostgresTagged, "SELECT lastval()"),
        (RecordingDatabase, "SELECT MAX(id) FROM persons"),
    ],
)
async def test_async_dispatch_by_capability_tag(database_type, expected_sql):
    database = database_type([StatementOutcome(["v"], [(13,)], 1)])

    assert await recover_identity_async(database, "persons") == 13
    assert database.statements == [(expected_sql, {})]


def test_fallback_rejects_unsafe_table_name():
    with pytest.raises(InvalidArgumentError):
        recover_identity(RecordingDatabase(), "persons WHERE 1=1")


def test_registered_strategy_replaces_fallback(monkeypatch):
    monkeypatch.setattr(engine_selector, "_STRATEGIES", dict(engine_selector._STRATEGIES))

    async def fetch_async(database):
        return 77

    register_identity_strategy(Engine.GENERIC, lambda database: 42, fetch_async)
    database = RecordingDatabase()

    assert identity_strategy(Engine.GENERIC) is not None
    assert recover_identity(database, "persons") == 42
    assert database.statements == []


def test_unknown_engine_has_no_strategy():
    assert identity_strategy(Engine.GENERIC) is None
    assert identity_strategy("cockroach") is None
