from typing import Optional

from structlog import get_logger

from app.config import settings
from app.stores.base import Store

logger = get_logger()

_STORE: Optional[Store] = None


def build_store(backend: str) -> Store:
    if backend == "memory":
        from app.stores.memory import MemoryStore
        return MemoryStore()
    if backend == "sql":
        from app.stores.sql import SqlStore
        return SqlStore.from_url(settings.DATABASE_URL)
    raise ValueError(f"Unknown STORE_BACKEND '{backend}'")


def get_store() -> Store:
    global _STORE
    if _STORE is None:
        _STORE = build_store(settings.STORE_BACKEND)
        logger.info("Store initialised", backend=settings.STORE_BACKEND)
    return _STORE


async def close_store() -> None:
    global _STORE
    if _STORE is not None:
        await _STORE.close()
        _STORE = None
