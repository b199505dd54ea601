from fastapi import APIRouter, Depends

from app.dependencies.permissions import Capability, require
from app.dependencies.store import get_store
from app.services.users import favorite_properties, landlord_properties
from app.stores.base import Store

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/properties")
async def my_properties(
    user: dict = Depends(require(Capability.LIST_OWN_PROPERTIES)),
    store: Store = Depends(get_store),
):
    data = await landlord_properties(store, user)
    return {"success": True, "count": len(data), "data": data}


@router.get("/favorites")
async def my_favorites(
    user: dict = Depends(require(Capability.LIST_FAVORITES)),
    store: Store = Depends(get_store),
):
    data = await favorite_properties(store, user)
    return {"success": True, "count": len(data), "data": data}
