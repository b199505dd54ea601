"""
Document store interface.

Documents are plain dicts shaped the way clients see them (camelCase keys,
nested ``location``, string ``id``). Every backend implements the same
collection operations and evaluates the predicates from
``app.services.predicates``.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from app.services.predicates import Predicate

# (field path, descending)
SortSpec = Sequence[Tuple[str, bool]]

_MISSING = object()


def get_path(doc: Dict[str, Any], path: str, default: Any = None) -> Any:
    current: Any = doc
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def has_path(doc: Dict[str, Any], path: str) -> bool:
    return get_path(doc, path, _MISSING) is not _MISSING


def set_path(doc: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def iter_paths(doc: Dict[str, Any], prefix: str = "") -> Iterator[Tuple[str, Any]]:
    """Yield ``(dotted path, value)`` for every leaf of a nested document."""
    for key, value in doc.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from iter_paths(value, f"{path}.")
        else:
            yield path, value


class Collection(ABC):
    name: str

    @abstractmethod
    async def find(
        self,
        predicate: Optional[Predicate] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[dict]:
        ...

    @abstractmethod
    async def count(self, predicate: Optional[Predicate] = None) -> int:
        ...

    @abstractmethod
    async def find_by_id(self, doc_id: str) -> Optional[dict]:
        ...

    async def find_one(self, predicate: Predicate) -> Optional[dict]:
        docs = await self.find(predicate, limit=1)
        return docs[0] if docs else None

    @abstractmethod
    async def insert(self, doc: dict) -> dict:
        """Store a new document, assigning ``id``, ``createdAt`` and ``updatedAt``."""

    @abstractmethod
    async def update(self, doc_id: str, changes: dict) -> Optional[dict]:
        """Apply a partial, possibly nested, change set. Returns None if the id is unknown."""

    @abstractmethod
    async def delete(self, doc_id: str) -> bool:
        ...

    @abstractmethod
    async def increment(self, doc_id: str, field: str, amount: int = 1, floor: Optional[int] = None) -> Optional[dict]:
        """Atomically add ``amount`` to a counter, never going below ``floor``."""

    @abstractmethod
    async def push(self, doc_id: str, field: str, value: Any, unique: bool = False) -> Optional[dict]:
        """Append to a list field; with ``unique`` an existing equal value is left alone."""

    @abstractmethod
    async def pull(self, doc_id: str, field: str, value: Any) -> Optional[dict]:
        """Remove every occurrence of ``value`` from a list field."""

    @abstractmethod
    async def add_to_set(self, doc_id: str, field: str, value: Any) -> bool:
        """Atomically append ``value`` unless already present. True when the list changed."""

    @abstractmethod
    async def remove_from_set(self, doc_id: str, field: str, value: Any) -> bool:
        """Atomically remove ``value``. True when the list changed."""


class Store(ABC):
    users: Collection
    properties: Collection
    messages: Collection

    @abstractmethod
    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        return None
