from fastapi import APIRouter, Depends
from structlog import get_logger

from app.dependencies.auth import get_current_user
from app.dependencies.rate_limit import rate_limit
from app.dependencies.store import get_store
from app.schemas.user import LoginRequest, RegisterRequest, UpdateDetailsRequest, UpdatePasswordRequest
from app.services import auth as auth_service
from app.services.projection import public_user
from app.stores.base import Store

logger = get_logger()
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", dependencies=[rate_limit(times=5, seconds=60)])
async def register(payload: RegisterRequest, store: Store = Depends(get_store)):
    token, user = await auth_service.register(store, payload)
    return {"success": True, "token": token, "user": user}


@router.post("/login", dependencies=[rate_limit(times=10, seconds=60)])
async def login(payload: LoginRequest, store: Store = Depends(get_store)):
    token, user = await auth_service.login(store, payload)
    return {"success": True, "token": token, "user": user}


@router.get("/me")
async def me(user: dict = Depends(get_current_user)):
    return {"success": True, "data": public_user(user)}


@router.put("/updatedetails")
async def update_details(
    payload: UpdateDetailsRequest,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    updated = await auth_service.update_details(store, user, payload)
    return {"success": True, "data": updated}


@router.put("/updatepassword")
async def update_password(
    payload: UpdatePasswordRequest,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    token, updated = await auth_service.update_password(store, user, payload)
    return {"success": True, "token": token, "user": updated}


@router.post("/logout")
async def logout(user: dict = Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy
    logger.info("User logged out", user_id=user["id"])
    return {"success": True, "data": {}}
