from typing import Tuple

from structlog import get_logger

from app.core.errors import Forbidden, Unauthorized, ValidationFailure
from app.core.security import create_token, hash_password, verify_password
from app.schemas.user import LoginRequest, RegisterRequest, UpdateDetailsRequest, UpdatePasswordRequest
from app.services.predicates import Equals, where
from app.services.projection import public_user
from app.stores.base import Store

logger = get_logger()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def register(store: Store, payload: RegisterRequest) -> Tuple[str, dict]:
    email = _normalize_email(payload.email)
    if await store.users.find_one(where(Equals("email", email))):
        raise ValidationFailure("User already exists")
    user = await store.users.insert({
        "name": payload.name.strip(),
        "email": email,
        "password": hash_password(payload.password),
        "phone": payload.phone,
        "role": payload.role,
        "profileImage": "",
        "isVerified": False,
        "isActive": True,
        "properties": [],
        "favorites": [],
        "preferredLocations": [],
        "maxBudget": None,
        "rating": 0,
        "reviewCount": 0,
    })
    logger.info("User registered", user_id=user["id"], role=user["role"])
    return create_token(user["id"]), public_user(user)


async def login(store: Store, payload: LoginRequest) -> Tuple[str, dict]:
    user = await store.users.find_one(where(Equals("email", _normalize_email(payload.email))))
    if user is None or not verify_password(payload.password, user.get("password")):
        logger.info("Login failed", email=payload.email)
        raise Unauthorized("Invalid credentials")
    if not user.get("isActive", True):
        raise Forbidden("Account is deactivated")
    logger.info("User logged in", user_id=user["id"])
    return create_token(user["id"]), public_user(user)


async def update_details(store: Store, user: dict, payload: UpdateDetailsRequest) -> dict:
    changes = {k: v for k, v in payload.to_document(exclude_unset=True).items() if v is not None or k == "maxBudget"}
    if "email" in changes:
        changes["email"] = _normalize_email(changes["email"])
        existing = await store.users.find_one(where(Equals("email", changes["email"])))
        if existing is not None and existing["id"] != user["id"]:
            raise ValidationFailure("Email is already in use")
    updated = await store.users.update(user["id"], changes)
    logger.info("User details updated", user_id=user["id"], fields=sorted(changes))
    return public_user(updated)


async def update_password(store: Store, user: dict, payload: UpdatePasswordRequest) -> Tuple[str, dict]:
    if not verify_password(payload.current_password, user.get("password")):
        raise Unauthorized("Password is incorrect")
    updated = await store.users.update(user["id"], {"password": hash_password(payload.new_password)})
    logger.info("User password updated", user_id=user["id"])
    return create_token(user["id"]), public_user(updated)
