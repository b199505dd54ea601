"""
Turns raw query-string parameters into typed search filters.

Nothing here raises: a parameter that cannot be parsed is dropped and the
search is left unconstrained on that dimension.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from structlog import get_logger

from app.schemas.property import AMENITIES, LEASE_TERMS, PROPERTY_TYPES
from app.services.predicates import Condition, Equals, InSet, Range

logger = get_logger()

# Parameters that control the response shape rather than filtering
CONTROL_PARAMS = ("select", "sort", "page", "limit")
FILTER_PARAMS = ("q", "location", "minPrice", "maxPrice", "propertyType", "bedrooms")

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+))")
_FIELD_PARAM = re.compile(r"^(?P<field>[A-Za-z][A-Za-z0-9_.]*)(?:\[(?P<op>[a-z]+)\])?$")
_OPERATORS = ("gte", "gt", "lte", "lt", "in")

# Integer columns are 32-bit
INT32_MIN, INT32_MAX = -2 ** 31, 2 ** 31 - 1


@dataclass(frozen=True)
class FilterSet:
    location: Optional[str] = None
    property_type: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    bedrooms: Optional[int] = None
    q: Optional[str] = None


def parse_int(value: Any) -> Optional[int]:
    """Parse the leading integer of a string, ``"3500abc"`` gives 3500 and ``"abc"`` gives None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def parse_int32(value: Any) -> Optional[int]:
    """Like ``parse_int`` but drops values an integer column cannot hold."""
    parsed = parse_int(value)
    if parsed is None or not INT32_MIN <= parsed <= INT32_MAX:
        return None
    return parsed


def parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else None


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    return None


def parse_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_choice(choices: Tuple[str, ...]) -> Callable[[Any], Optional[str]]:
    """A parser that keeps only one of ``choices``."""
    def parse(value: Any) -> Optional[str]:
        text = parse_str(value)
        return text if text in choices else None
    return parse


def normalize_filters(params: Mapping[str, Any]) -> FilterSet:
    q = params.get("q")
    return FilterSet(
        location=parse_str(params.get("location")),
        property_type=parse_choice(PROPERTY_TYPES)(params.get("propertyType")),
        min_price=parse_int(params.get("minPrice")),
        max_price=parse_int(params.get("maxPrice")),
        bedrooms=parse_int32(params.get("bedrooms")),
        q=q if q else None,
    )


# Property fields that may be filtered with ``field`` / ``field[op]`` parameters
FIELD_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "price": parse_float,
    "deposit": parse_float,
    "size": parse_float,
    "rating": parse_float,
    "bedrooms": parse_int32,
    "bathrooms": parse_int32,
    "viewCount": parse_int32,
    "favoriteCount": parse_int32,
    "reviewCount": parse_int32,
    "propertyType": parse_choice(PROPERTY_TYPES),
    "leaseTerm": parse_choice(LEASE_TERMS),
    "amenities": parse_choice(AMENITIES),
    "landlord": parse_str,
    "title": parse_str,
    "location.area": parse_str,
    "location.city": parse_str,
    "isAvailable": parse_bool,
    "isVerified": parse_bool,
    "isFeatured": parse_bool,
}


def parse_field_conditions(params: Mapping[str, Any]) -> List[Condition]:
    """
    Parse ``field=value`` and ``field[gte|gt|lte|lt|in]=value`` parameters.

    The search filter keys and the response-control keys are skipped, so
    ``bedrooms=3`` is left to the normalizer while ``bedrooms[lte]=3`` is
    handled here. Range operators on the same field merge into one range.
    """
    conditions: List[Condition] = []
    ranges: Dict[str, Range] = {}
    for key, raw in params.items():
        if key in CONTROL_PARAMS or key in FILTER_PARAMS:
            continue
        match = _FIELD_PARAM.match(key)
        if not match:
            logger.debug("Ignoring malformed filter parameter", param=key)
            continue
        field, op = match.group("field"), match.group("op")
        parser = FIELD_PARSERS.get(field)
        if parser is None or (op is not None and op not in _OPERATORS):
            logger.debug("Ignoring unsupported filter", field=field, op=op)
            continue

        if op == "in":
            values = [parser(part) for part in str(raw).split(",")]
            values = [v for v in values if v is not None]
            if values:
                conditions.append(InSet(field, tuple(values)))
            continue

        value = parser(raw)
        if value is None:
            logger.debug("Ignoring uncoercible filter value", field=field, value=raw)
            continue
        if op is None:
            conditions.append(Equals(field, value))
        else:
            bound = Range(field, **{op: value})
            ranges[field] = ranges[field].merge(bound) if field in ranges else bound
    conditions.extend(ranges.values())
    return conditions
