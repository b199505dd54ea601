import json
from datetime import datetime, timezone
from decimal import Decimal
from functools import partial
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import and_, false, func, or_, select, text, true, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from app.core.errors import DuplicateKeyError
from app.models.message import MESSAGE_FIELDS, Message
from app.models.property import PROPERTY_ARRAY_FIELDS, PROPERTY_FIELDS, Property, new_id
from app.models.user import USER_ARRAY_FIELDS, USER_FIELDS, User
from app.services.predicates import (
    AnyOf,
    Condition,
    Equals,
    FullText,
    InSet,
    Predicate,
    Range,
    Substring,
)
from app.stores.base import Collection, SortSpec, Store, set_path

_MISSING = object()


def _lookup(doc: Dict[str, Any], path: str) -> Any:
    """Like ``get_path`` but an explicit None on the way down counts as a value."""
    current: Any = doc
    for part in path.split("."):
        if current is None:
            return None
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _from_db(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlCollection(Collection):
    def __init__(self, name: str, sessions: async_sessionmaker, model, fields: Dict[str, str],
                 array_fields: Sequence[str] = (), unique: Sequence[str] = ()):
        self.name = name
        self.sessions = sessions
        self.model = model
        self.fields = fields
        self.array_fields = tuple(array_fields)
        self.unique = tuple(unique)

    # -- document <-> row mapping

    def _column(self, path: str):
        attr = self.fields.get(path)
        if attr is None:
            raise ValueError(f"Unknown field '{path}' for collection {self.name}")
        return getattr(self.model, attr)

    def _to_values(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        values = {}
        for path, attr in self.fields.items():
            if path in ("createdAt", "updatedAt"):
                continue
            value = _lookup(doc, path)
            if value is not _MISSING:
                values[attr] = value
        return values

    def _to_doc(self, row) -> dict:
        doc: Dict[str, Any] = {}
        for path, attr in self.fields.items():
            set_path(doc, path, _from_db(getattr(row, attr)))
        location = doc.get("location")
        if isinstance(location, dict) and all(v is None for v in location.get("coordinates", {}).values()):
            location["coordinates"] = None
        return doc

    # -- predicate compilation

    def compile(self, predicate: Optional[Predicate]):
        if not predicate:
            return true()
        return and_(*[self._compile(condition) for condition in predicate.conditions])

    def _compile(self, condition: Condition):
        if isinstance(condition, AnyOf):
            return or_(*[self.compile(option) for option in condition.options])
        if isinstance(condition, FullText):
            fts = getattr(self.model, "fts", None)
            if fts is None:
                raise ValueError(f"Collection {self.name} has no text index")
            terms = condition.terms
            if not terms:
                return false()
            # Any term may match
            return fts.op("@@")(func.to_tsquery("english", " | ".join(terms)))

        column = self._column(condition.field)
        is_array = condition.field in self.array_fields
        if isinstance(condition, Equals):
            if is_array:
                return column.contains([condition.value])
            if condition.value is None:
                return column.is_(None)
            return column == condition.value
        if isinstance(condition, InSet):
            if not condition.values:
                return false()
            if is_array:
                return or_(*[column.contains([value]) for value in condition.values])
            return column.in_(condition.values)
        if isinstance(condition, Substring):
            return column.ilike(f"%{_escape_like(condition.value)}%", escape="\\")
        if isinstance(condition, Range):
            clauses = []
            if condition.gte is not None:
                clauses.append(column >= condition.gte)
            if condition.gt is not None:
                clauses.append(column > condition.gt)
            if condition.lte is not None:
                clauses.append(column <= condition.lte)
            if condition.lt is not None:
                clauses.append(column < condition.lt)
            return and_(*clauses) if clauses else true()
        raise TypeError(f"Unsupported condition: {condition!r}")

    def _order_by(self, sort: Optional[SortSpec]) -> List:
        order = []
        for path, descending in sort or ():
            column = self._column(path)
            order.append(column.desc().nulls_last() if descending else column.asc().nulls_first())
        order.append(self.model.id.asc())
        return order

    def select_statement(self, predicate=None, sort=None, skip=0, limit=None):
        stmt = select(self.model).where(self.compile(predicate)).order_by(*self._order_by(sort))
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    # -- operations

    async def find(self, predicate=None, sort=None, skip=0, limit=None) -> List[dict]:
        async with self.sessions() as session:
            result = await session.execute(self.select_statement(predicate, sort, skip, limit))
            return [self._to_doc(row) for row in result.scalars().all()]

    async def count(self, predicate=None) -> int:
        stmt = select(func.count()).select_from(self.model).where(self.compile(predicate))
        async with self.sessions() as session:
            return (await session.execute(stmt)).scalar_one()

    async def find_by_id(self, doc_id: str) -> Optional[dict]:
        async with self.sessions() as session:
            row = await session.get(self.model, doc_id)
            return self._to_doc(row) if row is not None else None

    def _duplicate(self, values: Dict[str, Any], exc: IntegrityError) -> DuplicateKeyError:
        for path in self.unique:
            attr = self.fields[path]
            if attr in str(exc.orig):
                return DuplicateKeyError(path, values.get(attr))
        return DuplicateKeyError("unknown", None)

    async def insert(self, doc: dict) -> dict:
        values = self._to_values(doc)
        values["id"] = values.get("id") or new_id()
        row = self.model(**values)
        async with self.sessions() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if "unique" in str(e.orig).lower():
                    raise self._duplicate(values, e) from e
                raise
            await session.refresh(row)
            return self._to_doc(row)

    async def _update_values(self, doc_id: str, values: Dict[str, Any]) -> Optional[dict]:
        stmt = (
            update(self.model)
            .where(self.model.id == doc_id)
            .values(**values)
            .returning(self.model)
            .execution_options(synchronize_session=False)
        )
        async with self.sessions() as session:
            try:
                row = (await session.execute(stmt)).scalars().first()
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if "unique" in str(e.orig).lower():
                    raise self._duplicate(values, e) from e
                raise
            return self._to_doc(row) if row is not None else None

    async def update(self, doc_id: str, changes: dict) -> Optional[dict]:
        values = self._to_values(changes)
        values.pop("id", None)
        values["updated_at"] = datetime.now(timezone.utc)
        return await self._update_values(doc_id, values)

    async def delete(self, doc_id: str) -> bool:
        async with self.sessions() as session:
            row = await session.get(self.model, doc_id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
            return True

    async def increment(self, doc_id, field, amount=1, floor=None) -> Optional[dict]:
        column = self._column(field)
        value = column + amount
        if floor is not None:
            value = func.greatest(value, floor)
        attr = self.fields[field]
        return await self._update_values(doc_id, {attr: value, "updated_at": datetime.now(timezone.utc)})

    async def _modify_list(self, doc_id: str, field: str, modify) -> Optional[dict]:
        attr = self.fields[field]
        async with self.sessions() as session:
            # Row lock so concurrent pushes to the same list do not overwrite each other
            stmt = select(self.model).where(self.model.id == doc_id).with_for_update()
            row = (await session.execute(stmt)).scalars().first()
            if row is None:
                return None
            setattr(row, attr, modify(list(getattr(row, attr) or [])))
            await session.commit()
            await session.refresh(row)
            return self._to_doc(row)

    async def push(self, doc_id, field, value, unique=False) -> Optional[dict]:
        def modify(items):
            if not (unique and value in items):
                items.append(value)
            return items
        return await self._modify_list(doc_id, field, modify)

    async def pull(self, doc_id, field, value) -> Optional[dict]:
        return await self._modify_list(doc_id, field, lambda items: [item for item in items if item != value])

    async def add_to_set(self, doc_id, field, value) -> bool:
        changed = []

        def modify(items):
            if value not in items:
                items.append(value)
                changed.append(True)
            return items
        await self._modify_list(doc_id, field, modify)
        return bool(changed)

    async def remove_from_set(self, doc_id, field, value) -> bool:
        changed = []

        def modify(items):
            kept = [item for item in items if item != value]
            if len(kept) != len(items):
                changed.append(True)
            return kept
        await self._modify_list(doc_id, field, modify)
        return bool(changed)


class SqlStore(Store):
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        sessions = async_sessionmaker(engine, expire_on_commit=False)
        self.users = SqlCollection("users", sessions, User, USER_FIELDS, USER_ARRAY_FIELDS, unique=("email",))
        self.properties = SqlCollection("properties", sessions, Property, PROPERTY_FIELDS, PROPERTY_ARRAY_FIELDS)
        self.messages = SqlCollection("messages", sessions, Message, MESSAGE_FIELDS)

    @classmethod
    def from_url(cls, url: str) -> "SqlStore":
        # JSONB columns may hold dates and datetimes (reports, viewing requests)
        engine = create_async_engine(url, pool_pre_ping=True, json_serializer=partial(json.dumps, default=str))
        return cls(engine)

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def close(self) -> None:
        await self.engine.dispose()
