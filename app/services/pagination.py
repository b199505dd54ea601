from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.services.filters import parse_int

# OFFSET and LIMIT are 64-bit in SQL
MAX_OFFSET = 2 ** 63 - 1


@dataclass(frozen=True)
class Window:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def coerce_positive(value: Any, default: int) -> int:
    parsed = parse_int(value)
    if parsed is None or not 1 <= parsed <= MAX_OFFSET:
        return default
    return parsed


def page_window(page: Any, limit: Any, default_limit: int, max_limit: Optional[int] = None) -> Window:
    size = coerce_positive(limit, default_limit)
    if max_limit is not None:
        size = min(size, max_limit)
    window = Window(page=coerce_positive(page, 1), limit=size)
    if window.skip + window.limit > MAX_OFFSET:
        return Window(page=1, limit=size)
    return window


def pagination_links(window: Window, total: int) -> Dict[str, Dict[str, int]]:
    """
    Build the ``next``/``prev`` descriptors for a window over ``total`` matches.

    ``next`` is present while items remain past this window, ``prev`` whenever
    the window does not start at the first item.
    """
    links: Dict[str, Dict[str, int]] = {}
    if window.skip + window.limit < total:
        links["next"] = {"page": window.page + 1, "limit": window.limit}
    if window.skip > 0:
        links["prev"] = {"page": window.page - 1, "limit": window.limit}
    return links
