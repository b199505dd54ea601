from typing import Iterable, List

from app.services.filters import FilterSet
from app.services.predicates import (
    Condition,
    Equals,
    FullText,
    Predicate,
    Range,
    Substring,
    price_range,
)


def build_predicate(
    filters: FilterSet,
    available_only: bool = False,
    extra: Iterable[Condition] = (),
) -> Predicate:
    """
    Combine the filter dimensions with AND semantics.

    ``available_only`` is set by the public search path; the listing path
    leaves it off and shows unavailable properties too. ``minPrice`` is not
    checked against ``maxPrice``: an inverted range simply matches nothing.
    """
    conditions: List[Condition] = []
    if available_only:
        conditions.append(Equals("isAvailable", True))
    if filters.q:
        conditions.append(FullText(filters.q))
    if filters.location:
        conditions.append(Substring("location.area", filters.location))
    price = price_range(filters.min_price, filters.max_price)
    if price is not None:
        conditions.append(price)
    if filters.property_type:
        conditions.append(Equals("propertyType", filters.property_type))
    if filters.bedrooms is not None:
        # "3 bedrooms" means three or more
        conditions.append(Range("bedrooms", gte=filters.bedrooms))
    conditions.extend(extra)
    return Predicate(tuple(conditions))
