"""
Repositories package for SimpleDB.

Re-exports the repository interfaces, the generic implementation, and the
identity-recovery selector so downstream code can import from
`simpledb.repositories` directly.
"""

from simpledb.repositories.abstract import AbstractRepository, Repository
from simpledb.repositories.engine_selector import (
    IdentityStrategy,
    recover_identity,
    recover_identity_async,
    register_identity_strategy,
)
from simpledb.repositories.generic import GenericRepository

__all__ = [
    "AbstractRepository",
    "GenericRepository",
    "IdentityStrategy",
    "Repository",
    "recover_identity",
    "recover_identity_async",
    "register_identity_strategy",
]
