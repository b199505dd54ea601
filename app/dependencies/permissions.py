"""
Role based authorization expressed as capabilities.

Each mutating operation names the capability it needs. A role either holds
the capability outright or, for document-scoped capabilities, only over
documents it owns.
"""
from enum import Enum
from typing import Dict, FrozenSet, Optional

from fastapi import Depends

from app.core.errors import Forbidden
from app.dependencies.auth import get_current_user


class Capability(str, Enum):
    CREATE_PROPERTY = "property:create"
    UPDATE_PROPERTY = "property:update"
    DELETE_PROPERTY = "property:delete"
    UPLOAD_IMAGES = "property:upload-images"
    MODERATE_PROPERTY = "property:moderate"
    FAVORITE_PROPERTY = "property:favorite"
    REPORT_PROPERTY = "property:report"
    LIST_OWN_PROPERTIES = "user:properties"
    LIST_FAVORITES = "user:favorites"
    SEND_MESSAGE = "message:send"


ROLE_CAPABILITIES: Dict[str, FrozenSet[Capability]] = {
    "landlord": frozenset({
        Capability.CREATE_PROPERTY,
        Capability.UPDATE_PROPERTY,
        Capability.DELETE_PROPERTY,
        Capability.UPLOAD_IMAGES,
        Capability.REPORT_PROPERTY,
        Capability.LIST_OWN_PROPERTIES,
        Capability.SEND_MESSAGE,
    }),
    "tenant": frozenset({
        Capability.FAVORITE_PROPERTY,
        Capability.REPORT_PROPERTY,
        Capability.LIST_FAVORITES,
        Capability.SEND_MESSAGE,
    }),
    "admin": frozenset({
        Capability.UPDATE_PROPERTY,
        Capability.DELETE_PROPERTY,
        Capability.MODERATE_PROPERTY,
        Capability.REPORT_PROPERTY,
        Capability.SEND_MESSAGE,
    }),
}

# Capabilities a role may exercise on documents owned by someone else
UNRESTRICTED: Dict[str, FrozenSet[Capability]] = {
    "admin": frozenset({Capability.UPDATE_PROPERTY, Capability.DELETE_PROPERTY, Capability.MODERATE_PROPERTY}),
}

OWNED = frozenset({Capability.UPDATE_PROPERTY, Capability.DELETE_PROPERTY, Capability.UPLOAD_IMAGES})


def has_capability(principal: dict, capability: Capability, owner_id: Optional[str] = None) -> bool:
    role = principal.get("role")
    if capability not in ROLE_CAPABILITIES.get(role, frozenset()):
        return False
    if owner_id is None or capability not in OWNED:
        return True
    return owner_id == principal["id"] or capability in UNRESTRICTED.get(role, frozenset())


def check_capability(principal: dict, capability: Capability, owner_id: Optional[str] = None) -> None:
    if has_capability(principal, capability):
        if owner_id is None or has_capability(principal, capability, owner_id):
            return
        raise Forbidden(f"User {principal['id']} is not authorized to modify this property")
    raise Forbidden(f"User role {principal.get('role')} is not authorized to access this route")


def require(capability: Capability):
    """Dependency returning the principal once it holds ``capability`` (ownership is checked later)."""
    async def dependency(user: dict = Depends(get_current_user)) -> dict:
        check_capability(user, capability)
        return user
    return dependency
