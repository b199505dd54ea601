"""
Backend-agnostic query predicates.

A ``Predicate`` is a conjunction of conditions. Each condition is one of a
small set of tagged types that every store backend knows how to evaluate
(the memory store in Python, the SQL store by compiling to SQLAlchemy
expressions). Field names are document paths such as ``price`` or
``location.area``.
"""
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple, Union

_TERM_RE = re.compile(r"\w+", re.UNICODE)


def text_terms(text: str) -> List[str]:
    return [term.lower() for term in _TERM_RE.findall(text or "")]


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class Range:
    field: str
    gte: Any = None
    gt: Any = None
    lte: Any = None
    lt: Any = None

    def merge(self, other: "Range") -> "Range":
        return Range(
            field=self.field,
            gte=other.gte if other.gte is not None else self.gte,
            gt=other.gt if other.gt is not None else self.gt,
            lte=other.lte if other.lte is not None else self.lte,
            lt=other.lt if other.lt is not None else self.lt,
        )


@dataclass(frozen=True)
class Substring:
    """Case-insensitive literal substring match."""
    field: str
    value: str


@dataclass(frozen=True)
class FullText:
    """Matches documents whose indexed text fields contain any of the terms."""
    text: str

    @property
    def terms(self) -> List[str]:
        return text_terms(self.text)


@dataclass(frozen=True)
class InSet:
    field: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of nested predicates."""
    options: Tuple["Predicate", ...]


Condition = Union[Equals, Range, Substring, FullText, InSet, AnyOf]


@dataclass(frozen=True)
class Predicate:
    conditions: Tuple[Condition, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.conditions)

    def __len__(self) -> int:
        return len(self.conditions)


def where(*conditions: Condition) -> Predicate:
    return Predicate(tuple(conditions))


def any_of(*predicates: Predicate) -> AnyOf:
    return AnyOf(tuple(predicates))


def in_set(field: str, values: Iterable[Any]) -> InSet:
    return InSet(field, tuple(values))


def price_range(min_price: Optional[int], max_price: Optional[int]) -> Optional[Range]:
    if min_price is None and max_price is None:
        return None
    return Range("price", gte=min_price, lte=max_price)
