from datetime import datetime, timezone
from typing import List

from fastapi import UploadFile
from structlog import get_logger

from app.core.errors import NotFound
from app.dependencies.permissions import Capability, check_capability, has_capability
from app.schemas.property import PropertyCreate, PropertyUpdate, ReportRequest
from app.services.projection import project_property
from app.services.uploads import delete_image, save_images
from app.stores.base import Store

logger = get_logger()

# Optional fields that may be cleared with an explicit null
NULLABLE_FIELDS = ("virtualTour",)
MODERATION_FIELDS = ("isVerified", "isFeatured")


async def _get_or_404(store: Store, property_id: str) -> dict:
    doc = await store.properties.find_by_id(property_id)
    if doc is None:
        raise NotFound(f"Property not found with id of {property_id}")
    return doc


async def create_property(store: Store, landlord: dict, payload: PropertyCreate) -> dict:
    doc = payload.to_document()
    doc.update({
        "landlord": landlord["id"],
        "images": [],
        "reports": [],
        "isVerified": False,
        "isFeatured": False,
        "viewCount": 0,
        "favoriteCount": 0,
        "rating": 0,
        "reviewCount": 0,
    })
    created = await store.properties.insert(doc)
    await store.users.push(landlord["id"], "properties", created["id"], unique=True)
    logger.info("Property created", property_id=created["id"], landlord_id=landlord["id"])
    return created


async def update_property(store: Store, principal: dict, property_id: str, payload: PropertyUpdate) -> dict:
    existing = await _get_or_404(store, property_id)
    check_capability(principal, Capability.UPDATE_PROPERTY, owner_id=existing["landlord"])

    changes = payload.to_document(exclude_unset=True)
    changes = {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}
    if isinstance(changes.get("location"), dict):
        changes["location"] = {k: v for k, v in changes["location"].items() if v is not None or k == "coordinates"}
    if not has_capability(principal, Capability.MODERATE_PROPERTY):
        for field in MODERATION_FIELDS:
            changes.pop(field, None)

    updated = await store.properties.update(property_id, changes)
    if updated is None:
        raise NotFound(f"Property not found with id of {property_id}")
    logger.info("Property updated", property_id=property_id, user_id=principal["id"], fields=sorted(changes))
    return await project_property(store, updated)


async def delete_property(store: Store, principal: dict, property_id: str) -> None:
    existing = await _get_or_404(store, property_id)
    check_capability(principal, Capability.DELETE_PROPERTY, owner_id=existing["landlord"])

    await store.properties.delete(property_id)
    # The listing belongs to its landlord even when an admin deletes it
    await store.users.pull(existing["landlord"], "properties", property_id)
    for image in existing.get("images") or []:
        delete_image(image.get("storageId"))
    logger.info("Property deleted", property_id=property_id, user_id=principal["id"])


async def add_images(store: Store, principal: dict, property_id: str, files: List[UploadFile]) -> dict:
    existing = await _get_or_404(store, property_id)
    check_capability(principal, Capability.UPLOAD_IMAGES, owner_id=existing["landlord"])

    images = await save_images(files)
    updated = existing
    for image in images:
        updated = await store.properties.push(property_id, "images", image)
    logger.info("Property images added", property_id=property_id, count=len(images))
    return await project_property(store, updated)


async def add_favorite(store: Store, tenant: dict, property_id: str) -> dict:
    doc = await _get_or_404(store, property_id)
    # The counter moves only when this call changed the list
    if await store.users.add_to_set(tenant["id"], "favorites", property_id):
        doc = await store.properties.increment(property_id, "favoriteCount", 1)
        logger.info("Favorite added", property_id=property_id, user_id=tenant["id"])
    return await project_property(store, doc)


async def remove_favorite(store: Store, tenant: dict, property_id: str) -> dict:
    doc = await _get_or_404(store, property_id)
    if await store.users.remove_from_set(tenant["id"], "favorites", property_id):
        doc = await store.properties.increment(property_id, "favoriteCount", -1, floor=0)
        logger.info("Favorite removed", property_id=property_id, user_id=tenant["id"])
    return await project_property(store, doc)


async def report_property(store: Store, user: dict, property_id: str, payload: ReportRequest) -> dict:
    await _get_or_404(store, property_id)
    report = {
        "user": user["id"],
        "reason": payload.reason,
        "description": payload.description,
        "createdAt": datetime.now(timezone.utc),
    }
    await store.properties.push(property_id, "reports", report)
    logger.warning("Property reported", property_id=property_id, user_id=user["id"], reason=payload.reason)
    return report
