from datetime import datetime, timezone
from typing import Any, List

from structlog import get_logger

from app.config import settings
from app.core.errors import Forbidden, NotFound, ValidationFailure
from app.schemas.message import MessageCreate
from app.services.pagination import page_window, pagination_links
from app.services.predicates import Equals, any_of, in_set, where
from app.services.projection import load_user_summaries
from app.stores.base import Store

logger = get_logger()

NEWEST_FIRST = [("createdAt", True)]
OLDEST_FIRST = [("createdAt", False)]


async def _populate(store: Store, messages: List[dict]) -> List[dict]:
    """Replace sender/receiver ids with user summaries and the property id with ``{id, title}``."""
    users = await load_user_summaries(store, [m["sender"] for m in messages] + [m["receiver"] for m in messages])
    property_ids = sorted({m["property"] for m in messages})
    properties = {}
    if property_ids:
        for doc in await store.properties.find(where(in_set("id", property_ids))):
            properties[doc["id"]] = {"id": doc["id"], "title": doc["title"]}
    populated = []
    for message in messages:
        item = dict(message)
        item["sender"] = users.get(message["sender"])
        item["receiver"] = users.get(message["receiver"])
        item["property"] = properties.get(message["property"])
        populated.append(item)
    return populated


async def list_messages(store: Store, user: dict, page: Any = None, limit: Any = None) -> dict:
    predicate = where(any_of(where(Equals("receiver", user["id"])), where(Equals("sender", user["id"]))))
    window = page_window(page, limit, default_limit=settings.MESSAGES_PAGE_LIMIT, max_limit=settings.MAX_PAGE_LIMIT)
    total = await store.messages.count(predicate)
    docs = await store.messages.find(predicate, sort=NEWEST_FIRST, skip=window.skip, limit=window.limit)
    data = await _populate(store, docs)
    unread = await store.messages.count(where(Equals("receiver", user["id"]), Equals("isRead", False)))
    return {
        "success": True,
        "count": len(data),
        "unread": unread,
        "pagination": pagination_links(window, total),
        "data": data,
    }


async def send_message(store: Store, sender: dict, payload: MessageCreate) -> dict:
    if payload.receiver == sender["id"]:
        raise ValidationFailure("You cannot send a message to yourself")
    receiver = await store.users.find_by_id(payload.receiver)
    if receiver is None:
        raise NotFound(f"User not found with id of {payload.receiver}")
    prop = await store.properties.find_by_id(payload.property)
    if prop is None:
        raise NotFound(f"Property not found with id of {payload.property}")

    doc = payload.to_document()
    doc.update({"sender": sender["id"], "isRead": False, "readAt": None})
    message = await store.messages.insert(doc)
    logger.info(
        "Message sent",
        message_id=message["id"],
        sender_id=sender["id"],
        receiver_id=receiver["id"],
        property_id=prop["id"],
        viewing_request=message.get("viewingRequest") is not None,
    )
    return (await _populate(store, [message]))[0]


async def mark_read(store: Store, user: dict, message_id: str) -> dict:
    message = await store.messages.find_by_id(message_id)
    if message is None:
        raise NotFound(f"Message not found with id of {message_id}")
    if message["receiver"] != user["id"]:
        raise Forbidden("Only the receiver can mark a message as read")
    if not message.get("isRead"):
        message = await store.messages.update(message_id, {"isRead": True, "readAt": datetime.now(timezone.utc)})
    return (await _populate(store, [message]))[0]


async def conversation(store: Store, user: dict, other_user_id: str, property_id: str) -> dict:
    """Messages exchanged between the caller and another user about one property, oldest first."""
    between = any_of(
        where(Equals("sender", user["id"]), Equals("receiver", other_user_id)),
        where(Equals("sender", other_user_id), Equals("receiver", user["id"])),
    )
    docs = await store.messages.find(where(between, Equals("property", property_id)), sort=OLDEST_FIRST)
    data = await _populate(store, docs)
    return {"success": True, "count": len(data), "data": data}
