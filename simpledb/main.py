from __future__ import annotations

import asyncio
import sys

import typer

from simpledb.config import get_settings
from simpledb.demo import run_demo
from simpledb.errors import DataAccessError
from simpledb.infrastructure import postgres, sqlite
from simpledb.infrastructure.db_factory import DatabaseType, database_from_settings
from simpledb.utils.logging import configure_logging

app = typer.Typer(help="SimpleDB data-access layer CLI.")

ENGINE_OPTION = typer.Option(
    DatabaseType.SQLITE,
    "--engine",
    "-e",
    help="Storage engine to use (sqlite or postgres).",
)


def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"SQLite={settings.sqlite_path} | "
        f"Postgres={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"env={settings.app_env} log={settings.log_level} strict_mapping={settings.strict_mapping}"
    )


@app.command()
def demo(engine: DatabaseType = ENGINE_OPTION) -> None:
    """
    Run the create/read/update/find walkthrough against the chosen engine.
    """
    _setup()

    async def _run() -> None:
        async with database_from_settings(engine) as database:
            await run_demo(database)

    try:
        asyncio.run(_run())
    except DataAccessError as exc:
        typer.echo(f"Demo failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def version(engine: DatabaseType = ENGINE_OPTION) -> None:
    """
    Print the engine version string.
    """
    _setup()
    with database_from_settings(engine) as database:
        try:
            if engine is DatabaseType.SQLITE:
                typer.echo(f"SQLite {sqlite.sqlite_version(database)}")
            else:
                typer.echo(postgres.server_version(database))
        except DataAccessError as exc:
            typer.echo(f"Version query failed: {exc}", err=True)
            raise typer.Exit(code=1) from exc


@app.command()
def vacuum(
    engine: DatabaseType = ENGINE_OPTION,
    table: str = typer.Option("persons", "--table", "-t", help="Table to analyze (postgres)."),
) -> None:
    """
    Run the engine maintenance pass (VACUUM for SQLite, ANALYZE for Postgres).
    """
    _setup()
    with database_from_settings(engine) as database:
        try:
            if engine is DatabaseType.SQLITE:
                sqlite.vacuum(database)
            else:
                postgres.analyze_table(database, table)
        except DataAccessError as exc:
            typer.echo(f"Maintenance failed: {exc}", err=True)
            raise typer.Exit(code=1) from exc
    typer.echo("Done.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
