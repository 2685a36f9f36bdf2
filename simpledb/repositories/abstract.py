"""
Repository interfaces for SimpleDB.

Concrete repositories implement the Repository protocol: CRUD plus ad-hoc find,
each with a blocking and a non-blocking variant that share semantics and error
behaviour. AbstractRepository is the ABC helper for class-based implementations.
"""

from __future__ import annotations

import abc
from typing import Any, Generic, List, Mapping, Optional, Protocol, TypeVar, runtime_checkable

from simpledb.domain.models import Record

R = TypeVar("R", bound=Record)


@runtime_checkable
class Repository(Protocol[R]):
    """
    Common interface for record repositories.

    Lookups return None / an empty list when nothing matches; they never raise
    for absence.
    """

    def get_all(self) -> List[R]: ...

    async def get_all_async(self) -> List[R]: ...

    def get_by_id(self, record_id: int) -> Optional[R]: ...

    async def get_by_id_async(self, record_id: int) -> Optional[R]: ...

    def create(self, record: R) -> R: ...

    async def create_async(self, record: R) -> R: ...

    def update(self, record: R) -> bool: ...

    async def update_async(self, record: R) -> bool: ...

    def delete(self, record_id: int) -> bool: ...

    async def delete_async(self, record_id: int) -> bool: ...

    def find(self, query: str, parameters: Optional[Mapping[str, Any]] = None) -> List[R]: ...

    async def find_async(
        self, query: str, parameters: Optional[Mapping[str, Any]] = None
    ) -> List[R]: ...


class AbstractRepository(abc.ABC, Generic[R]):
    """
    Optional ABC helper for class-based implementations.

    Subclasses implement every operation in both execution modes.
    """

    @abc.abstractmethod
    def get_all(self) -> List[R]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def get_all_async(self) -> List[R]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def get_by_id(self, record_id: int) -> Optional[R]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def get_by_id_async(self, record_id: int) -> Optional[R]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def create(self, record: R) -> R:  # pragma: no cover - interface only
        """Insert a record and write the assigned identifier back into it."""
        raise NotImplementedError

    @abc.abstractmethod
    async def create_async(self, record: R) -> R:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def update(self, record: R) -> bool:  # pragma: no cover - interface only
        """Persist an existing record. False means no row had its id."""
        raise NotImplementedError

    @abc.abstractmethod
    async def update_async(self, record: R) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, record_id: int) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def delete_async(self, record_id: int) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def find(
        self, query: str, parameters: Optional[Mapping[str, Any]] = None
    ) -> List[R]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def find_async(
        self, query: str, parameters: Optional[Mapping[str, Any]] = None
    ) -> List[R]:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "AbstractRepository",
    "Repository",
]
