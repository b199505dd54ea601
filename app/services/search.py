from typing import Any, Mapping

from structlog import get_logger

from app.config import settings
from app.core.errors import NotFound
from app.services.filters import normalize_filters, parse_field_conditions
from app.services.pagination import page_window, pagination_links
from app.services.projection import DEFAULT_SORT, parse_select, parse_sort, project_properties, project_property
from app.services.query_builder import build_predicate
from app.stores.base import Store

logger = get_logger()


async def list_properties(store: Store, params: Mapping[str, Any]) -> dict:
    """
    Paginated listing over every property, available or not.

    ``params`` are the raw query parameters: ``select``, ``sort``, ``page``,
    ``limit``, the search filters and any ``field`` / ``field[op]`` filters.
    """
    filters = normalize_filters(params)
    predicate = build_predicate(filters, available_only=False, extra=parse_field_conditions(params))
    window = page_window(
        params.get("page"), params.get("limit"),
        default_limit=settings.DEFAULT_PAGE_LIMIT, max_limit=settings.MAX_PAGE_LIMIT,
    )
    sort = parse_sort(params.get("sort"))

    # Count and fetch are separate reads; concurrent writes can make the links slightly stale
    total = await store.properties.count(predicate)
    docs = await store.properties.find(predicate, sort=sort, skip=window.skip, limit=window.limit)
    data = await project_properties(store, docs, parse_select(params.get("select")))

    logger.info(
        "Listed properties",
        conditions=len(predicate),
        page=window.page,
        limit=window.limit,
        total=total,
        result_count=len(data),
    )
    return {
        "success": True,
        "count": len(data),
        "pagination": pagination_links(window, total),
        "data": data,
    }


async def search_properties(store: Store, params: Mapping[str, Any]) -> dict:
    """
    Public search: available properties only, newest first, the whole match set
    in one response (no pagination envelope).
    """
    filters = normalize_filters(params)
    predicate = build_predicate(filters, available_only=True)
    docs = await store.properties.find(predicate, sort=parse_sort(DEFAULT_SORT))
    data = await project_properties(store, docs)
    logger.info("Search completed", filters=vars(filters), result_count=len(data))
    return {"success": True, "count": len(data), "data": data}


async def get_property(store: Store, property_id: str) -> dict:
    """Fetch one property and count the view before returning it."""
    doc = await store.properties.increment(property_id, "viewCount", 1)
    if doc is None:
        raise NotFound(f"Property not found with id of {property_id}")
    return {"success": True, "data": await project_property(store, doc)}
