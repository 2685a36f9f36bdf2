"""
End-to-end walkthrough of the repository API.

Runs the same sequence against either engine through the non-blocking API:
ensure the `persons` table, list what is there, then either update the first
person or create, read back, and update a new one, and finally run a
parameterized LIKE query.

Usage:
    from simpledb.demo import run_demo
    from simpledb.infrastructure import create_sqlite_database

    async with create_sqlite_database("sample.db") as db:
        await run_demo(db)
"""

from __future__ import annotations

import time
from datetime import date
from typing import List, Optional

from rich.console import Console

from simpledb.domain.models import Person
from simpledb.errors import DatabaseConnectionError
from simpledb.infrastructure.connection import Database
from simpledb.reporter import print_persons
from simpledb.repositories.generic import GenericRepository
from simpledb.schema import ensure_persons_table_async
from simpledb.utils.logging import get_logger

log = get_logger(__name__)


async def run_demo(database: Database, console: Optional[Console] = None) -> List[Person]:
    """
    Run the walkthrough and return every person stored at the end.

    Raises
    ------
    DatabaseConnectionError
        If the connection cannot be opened.
    """
    console = console or Console()

    if not await database.open_async():
        raise DatabaseConnectionError(f"Failed to connect to {database.engine.value} database.")
    console.print(f"Connected to {database.engine.value} database.")

    await ensure_persons_table_async(database)
    repository = GenericRepository(database, Person)

    existing = await repository.get_all_async()
    if existing:
        print_persons(existing, title="Existing persons", console=console)
        person = existing[0]
        person.email = f"updated.{time.time_ns()}@example.com"
        updated = await repository.update_async(person)
        console.print(f"Updated person {person.id}: {updated}, new email: {person.email}")
    else:
        console.print("No existing persons found. Creating new person.")
        person = await repository.create_async(
            Person(
                first_name="John",
                last_name="Doe",
                email="john.doe@example.com",
                date_of_birth=date(1980, 1, 1),
            )
        )
        console.print(f"Inserted person with id: {person.id}")

        retrieved = await repository.get_by_id_async(person.id)
        if retrieved is not None:
            console.print(f"Retrieved person: {retrieved.first_name} {retrieved.last_name}")
            retrieved.email = "john.updated@example.com"
            updated = await repository.update_async(retrieved)
            console.print(f"Updated person: {updated}")

    everyone = await repository.get_all_async()
    print_persons(everyone, title="All persons", console=console)

    matches = await repository.find_async(
        "SELECT * FROM persons WHERE first_name LIKE :first_name",
        {"first_name": "J%"},
    )
    print_persons(matches, title="Custom query (first_name LIKE 'J%')", console=console)

    log.info("Demo complete", extra={"engine": database.engine.value, "rows": len(everyone)})
    return everyone


__all__ = ["run_demo"]
