from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from structlog import get_logger

from app.core.errors import Unauthorized
from app.core.security import decode_token
from app.dependencies.store import get_store
from app.stores.base import Store

logger = get_logger()
security = HTTPBearer(auto_error=False)

NOT_AUTHORIZED = "Not authorized to access this route"


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    store: Store = Depends(get_store),
) -> dict:
    """The authenticated principal: the full user document of the bearer token's owner."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized(NOT_AUTHORIZED)
    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("id"):
        logger.info("Rejected bearer token")
        raise Unauthorized(NOT_AUTHORIZED)
    user = await store.users.find_by_id(payload["id"])
    if user is None or not user.get("isActive", True):
        logger.info("Token user missing or inactive", user_id=payload["id"])
        raise Unauthorized(NOT_AUTHORIZED)
    return user
