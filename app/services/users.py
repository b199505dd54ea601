from typing import List

from app.services.predicates import Equals, in_set, where
from app.services.projection import parse_sort, project_properties
from app.stores.base import Store


async def landlord_properties(store: Store, landlord: dict) -> List[dict]:
    docs = await store.properties.find(where(Equals("landlord", landlord["id"])), sort=parse_sort(None))
    return await project_properties(store, docs)


async def favorite_properties(store: Store, tenant: dict) -> List[dict]:
    favorites = tenant.get("favorites") or []
    if not favorites:
        return []
    docs = await store.properties.find(where(in_set("id", favorites)), sort=parse_sort(None))
    return await project_properties(store, docs)
