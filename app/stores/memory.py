import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from app.core.errors import DuplicateKeyError
from app.models.property import PROPERTY_TEXT_FIELDS
from app.services.predicates import (
    AnyOf,
    Condition,
    Equals,
    FullText,
    InSet,
    Predicate,
    Range,
    Substring,
    text_terms,
)
from app.stores.base import Collection, SortSpec, Store, get_path, iter_paths, set_path


def _compare(value: Any, bound: Any, op: str) -> bool:
    try:
        if op == "gte":
            return value >= bound
        if op == "gt":
            return value > bound
        if op == "lte":
            return value <= bound
        return value < bound
    except TypeError:
        return False


def matches(predicate: Optional[Predicate], doc: dict, text_fields: Sequence[str] = ()) -> bool:
    if not predicate:
        return True
    return all(_matches(condition, doc, text_fields) for condition in predicate.conditions)


def _matches(condition: Condition, doc: dict, text_fields: Sequence[str]) -> bool:
    if isinstance(condition, AnyOf):
        return any(matches(option, doc, text_fields) for option in condition.options)
    if isinstance(condition, FullText):
        words = set()
        for field in text_fields:
            words.update(text_terms(str(get_path(doc, field) or "")))
        return any(term in words for term in condition.terms)

    value = get_path(doc, condition.field)
    if isinstance(condition, Equals):
        if isinstance(value, list):
            return condition.value in value
        return value == condition.value
    if isinstance(condition, InSet):
        if isinstance(value, list):
            return any(item in condition.values for item in value)
        return value in condition.values
    if isinstance(condition, Substring):
        return isinstance(value, str) and condition.value.lower() in value.lower()
    if isinstance(condition, Range):
        if value is None:
            return False
        bounds = (("gte", condition.gte), ("gt", condition.gt), ("lte", condition.lte), ("lt", condition.lt))
        return all(_compare(value, bound, op) for op, bound in bounds if bound is not None)
    raise TypeError(f"Unsupported condition: {condition!r}")


def _sort_docs(docs: List[dict], sort: Optional[SortSpec]) -> List[dict]:
    # Stable sorts applied from the least to the most significant key
    for field, descending in reversed(list(sort or ())):
        present = [d for d in docs if get_path(d, field) is not None]
        missing = [d for d in docs if get_path(d, field) is None]
        present.sort(key=lambda d: get_path(d, field), reverse=descending)
        # Missing values sort lowest, as in a document database
        docs = missing + present if not descending else present + missing
    return docs


class MemoryCollection(Collection):
    def __init__(self, name: str, text_fields: Sequence[str] = (), unique: Sequence[str] = ()):
        self.name = name
        self.text_fields = tuple(text_fields)
        self.unique = tuple(unique)
        self._docs: Dict[str, dict] = {}
        self._last_stamp: Optional[datetime] = None

    def _now(self) -> datetime:
        # Strictly increasing so creation order is always recoverable from createdAt
        now = datetime.now(timezone.utc)
        if self._last_stamp is not None and now <= self._last_stamp:
            now = self._last_stamp + timedelta(microseconds=1)
        self._last_stamp = now
        return now

    def _check_unique(self, doc: dict, exclude_id: Optional[str] = None) -> None:
        for field in self.unique:
            value = get_path(doc, field)
            if value is None:
                continue
            for other in self._docs.values():
                if other["id"] != exclude_id and get_path(other, field) == value:
                    raise DuplicateKeyError(field, value)

    def _get(self, doc_id: str) -> Optional[dict]:
        return self._docs.get(doc_id)

    async def find(self, predicate=None, sort=None, skip=0, limit=None) -> List[dict]:
        docs = [d for d in self._docs.values() if matches(predicate, d, self.text_fields)]
        docs = _sort_docs(docs, sort)
        end = None if limit is None else skip + limit
        return [copy.deepcopy(d) for d in docs[skip:end]]

    async def count(self, predicate=None) -> int:
        return sum(1 for d in self._docs.values() if matches(predicate, d, self.text_fields))

    async def find_by_id(self, doc_id: str) -> Optional[dict]:
        doc = self._get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert(self, doc: dict) -> dict:
        stored = copy.deepcopy(doc)
        stored["id"] = stored.get("id") or uuid.uuid4().hex
        self._check_unique(stored)
        stamp = self._now()
        stored["createdAt"] = stamp
        stored["updatedAt"] = stamp
        self._docs[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update(self, doc_id: str, changes: dict) -> Optional[dict]:
        doc = self._get(doc_id)
        if doc is None:
            return None
        updated = copy.deepcopy(doc)
        for path, value in iter_paths(changes):
            if path in ("id", "createdAt"):
                continue
            set_path(updated, path, copy.deepcopy(value))
        self._check_unique(updated, exclude_id=doc_id)
        updated["updatedAt"] = self._now()
        self._docs[doc_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, doc_id: str) -> bool:
        return self._docs.pop(doc_id, None) is not None

    async def increment(self, doc_id, field, amount=1, floor=None) -> Optional[dict]:
        doc = self._get(doc_id)
        if doc is None:
            return None
        value = (get_path(doc, field) or 0) + amount
        if floor is not None:
            value = max(floor, value)
        set_path(doc, field, value)
        doc["updatedAt"] = self._now()
        return copy.deepcopy(doc)

    async def push(self, doc_id, field, value, unique=False) -> Optional[dict]:
        doc = self._get(doc_id)
        if doc is None:
            return None
        items = list(get_path(doc, field) or [])
        if not (unique and value in items):
            items.append(copy.deepcopy(value))
        set_path(doc, field, items)
        doc["updatedAt"] = self._now()
        return copy.deepcopy(doc)

    async def pull(self, doc_id, field, value) -> Optional[dict]:
        doc = self._get(doc_id)
        if doc is None:
            return None
        set_path(doc, field, [item for item in (get_path(doc, field) or []) if item != value])
        doc["updatedAt"] = self._now()
        return copy.deepcopy(doc)

    # No await between the check and the write, so these cannot interleave
    async def add_to_set(self, doc_id, field, value) -> bool:
        doc = self._get(doc_id)
        if doc is None:
            return False
        items = list(get_path(doc, field) or [])
        if value in items:
            return False
        set_path(doc, field, items + [copy.deepcopy(value)])
        doc["updatedAt"] = self._now()
        return True

    async def remove_from_set(self, doc_id, field, value) -> bool:
        doc = self._get(doc_id)
        if doc is None:
            return False
        items = list(get_path(doc, field) or [])
        if value not in items:
            return False
        set_path(doc, field, [item for item in items if item != value])
        doc["updatedAt"] = self._now()
        return True


class MemoryStore(Store):
    def __init__(self):
        self.users = MemoryCollection("users", unique=("email",))
        self.properties = MemoryCollection("properties", text_fields=PROPERTY_TEXT_FIELDS)
        self.messages = MemoryCollection("messages")

    async def ping(self) -> bool:
        return True
