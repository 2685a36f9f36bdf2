"""
Engine selector: recovers the engine-assigned identifier after an INSERT.

Dispatch is a lookup keyed by the connection's capability tag
(`database.engine`), never by its concrete class. Engines without a registered
strategy fall back to `SELECT MAX(id)`, which is only correct when no other
session inserts into the table concurrently. That fallback is a known
limitation; register a real strategy for any engine used in production.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, NamedTuple

from simpledb.domain.models import ID_FIELD
from simpledb.infrastructure import postgres, sqlite
from simpledb.infrastructure.connection import Database, Engine, validate_identifier
from simpledb.utils.logging import get_logger

log = get_logger(__name__)


class IdentityStrategy(NamedTuple):
    fetch: Callable[[Database], int]
    fetch_async: Callable[[Database], Awaitable[int]]


_STRATEGIES: Dict[Engine, IdentityStrategy] = {
    Engine.SQLITE: IdentityStrategy(sqlite.last_insert_rowid, sqlite.last_insert_rowid_async),
    Engine.POSTGRES: IdentityStrategy(postgres.last_insert_id, postgres.last_insert_id_async),
}


def register_identity_strategy(
    engine: Engine,
    fetch: Callable[[Database], int],
    fetch_async: Callable[[Database], Awaitable[int]],
) -> None:
    """Register (or replace) the identity primitive for an engine tag."""
    _STRATEGIES[engine] = IdentityStrategy(fetch, fetch_async)


def identity_strategy(engine: Any) -> IdentityStrategy | None:
    return _STRATEGIES.get(engine)


def _max_id_sql(table_name: str) -> str:
    return f"SELECT MAX({ID_FIELD}) FROM {validate_identifier(table_name)}"


def recover_identity(database: Database, table_name: str) -> int:
    """Return the identifier the engine assigned to the last row inserted on this session."""
    strategy = identity_strategy(getattr(database, "engine", Engine.GENERIC))
    if strategy is not None:
        return strategy.fetch(database)
    log.debug("No identity primitive for engine; using MAX(id)", extra={"table": table_name})
    return int(database.execute_scalar(_max_id_sql(table_name)))


async def recover_identity_async(database: Database, table_name: str) -> int:
    strategy = identity_strategy(getattr(database, "engine", Engine.GENERIC))
    if strategy is not None:
        return await strategy.fetch_async(database)
    log.debug("No identity primitive for engine; using MAX(id)", extra={"table": table_name})
    return int(await database.execute_scalar_async(_max_id_sql(table_name)))


__all__ = [
    "IdentityStrategy",
    "identity_strategy",
    "recover_identity",
    "recover_identity_async",
    "register_identity_strategy",
]
