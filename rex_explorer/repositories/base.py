"""
Keyed in-process stores for live domain objects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, TypeVar

from rex_explorer.core.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class BaseRepository(ABC, Generic[T]):
    """
    Async store interface shared by the repositories.
    """

    @abstractmethod
    async def get(self, id: str) -> Optional[T]:
        ...

    @abstractmethod
    async def save(self, entity: T) -> T:
        ...

    @abstractmethod
    async def delete(self, id: str) -> bool:
        ...

    @abstractmethod
    async def list(self, filters: Optional[dict[str, Any]] = None) -> list[T]:
        """Entities whose attributes equal every value in ``filters``."""
        ...


class InMemoryRepository(BaseRepository[T]):
    """
    Dictionary-backed store keyed by ``key(entity)``.

    Objects are held as-is, never copied or serialized, so callers share
    the live instance.
    """

    def __init__(self, key: Callable[[T], str]) -> None:
        self._key = key
        self._items: dict[str, T] = {}

    def __len__(self) -> int:
        return len(self._items)

    async def get(self, id: str) -> Optional[T]:
        return self._items.get(id)

    async def save(self, entity: T) -> T:
        self._items[self._key(entity)] = entity
        return entity

    async def delete(self, id: str) -> bool:
        return self._items.pop(id, None) is not None

    async def list(self, filters: Optional[dict[str, Any]] = None) -> list[T]:
        items = list(self._items.values())
        for attribute, expected in (filters or {}).items():
            items = [item for item in items if getattr(item, attribute, None) == expected]
        return items

    def _evict(self, predicate: Callable[[T], bool]) -> list[T]:
        evicted = [item for item in self._items.values() if predicate(item)]
        for item in evicted:
            del self._items[self._key(item)]
        if evicted:
            logger.debug("Evicted entries", count=len(evicted))
        return evicted
