from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.dependencies.auth import get_current_user
from app.dependencies.permissions import Capability, require
from app.dependencies.rate_limit import rate_limit
from app.dependencies.store import get_store
from app.schemas.message import MessageCreate
from app.services import messages as message_service
from app.stores.base import Store

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("")
async def list_messages(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    return await message_service.list_messages(store, user, page, limit)


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[rate_limit(times=20, seconds=60)])
async def send_message(
    payload: MessageCreate,
    user: dict = Depends(require(Capability.SEND_MESSAGE)),
    store: Store = Depends(get_store),
):
    message = await message_service.send_message(store, user, payload)
    return {"success": True, "data": message}


@router.put("/{message_id}/read")
async def mark_read(
    message_id: str,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    message = await message_service.mark_read(store, user, message_id)
    return {"success": True, "data": message}


@router.get("/conversation/{user_id}/{property_id}")
async def conversation(
    user_id: str,
    property_id: str,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    return await message_service.conversation(store, user, user_id, property_id)
