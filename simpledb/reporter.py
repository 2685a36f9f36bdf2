from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from simpledb.domain.models import Person


def _fmt(value: object) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, Enum):
        return value.name
    return str(value)


def print_persons(
    persons: Sequence[Person],
    title: str = "Persons",
    console: Optional[Console] = None,
) -> None:
    """
    Render persons as a rich table.
    """
    console = console or Console()

    if not persons:
        console.print(f"[yellow]{title}: no rows.[/yellow]")
        return

    table = Table(title=title, box=box.ROUNDED, caption=f"{len(persons)} row(s)")
    table.add_column("Id", justify="right", style="cyan", no_wrap=True)
    table.add_column("First name", style="magenta")
    table.add_column("Last name", style="magenta")
    table.add_column("Email", style="green")
    table.add_column("Status", style="blue")
    table.add_column("Created", style="dim")
    table.add_column("Updated", style="yellow")

    for person in persons:
        table.add_row(
            str(person.id),
            person.first_name,
            person.last_name,
            person.email,
            _fmt(person.status),
            _fmt(person.created_at),
            _fmt(person.updated_at),
        )

    console.print(table)


__all__ = ["print_persons"]
