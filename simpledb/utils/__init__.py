"""
Utilities package for SimpleDB.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of mapping or engine logic.
"""

from simpledb.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
