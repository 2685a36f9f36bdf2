"""
SimpleDB - a backend-agnostic data-access layer.

One connection contract, two engines (SQLite and PostgreSQL), and a generic
repository that maps typed records to tables:

- Connection adapters with blocking and non-blocking execution
- Field-descriptor based projection (writes) and materialization (reads)
- Named-parameter binding everywhere; values never reach the SQL text
- Engine-specific identity recovery after INSERT
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from simpledb.config import Settings, get_settings
from simpledb.domain.models import Person, PersonStatus, Record
from simpledb.errors import (
    DataAccessError,
    DatabaseConnectionError,
    InvalidArgumentError,
    MappingError,
    ValidationError,
)
from simpledb.infrastructure import (
    Database,
    DatabaseType,
    Engine,
    PostgresDatabase,
    ResultSet,
    SQLiteDatabase,
    create_database,
    create_postgres_database,
    create_sqlite_database,
)
from simpledb.mapping import MappingDiagnostic, Materialized, materialize, project
from simpledb.repositories import GenericRepository, Repository
from simpledb.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "Person",
    "PersonStatus",
    "Record",
    # Errors
    "DataAccessError",
    "DatabaseConnectionError",
    "InvalidArgumentError",
    "MappingError",
    "ValidationError",
    # Connections
    "Database",
    "DatabaseType",
    "Engine",
    "PostgresDatabase",
    "ResultSet",
    "SQLiteDatabase",
    "create_database",
    "create_postgres_database",
    "create_sqlite_database",
    # Mapping
    "MappingDiagnostic",
    "Materialized",
    "materialize",
    "project",
    # Repositories
    "GenericRepository",
    "Repository",
    # Logging
    "configure_logging",
    "get_logger",
]
