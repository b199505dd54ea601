from fastapi import APIRouter, Depends
from fastapi_limiter import FastAPILimiter
from structlog import get_logger

from app.config import settings
from app.dependencies.store import get_store
from app.stores.base import Store

logger = get_logger()
router = APIRouter(prefix="/api", tags=["health"])

@router.get("/health")
async def health():
    return {"status": "ok"}

@router.get("/health/ready")
async def readiness(store: Store = Depends(get_store)):
    details = {"status": "ok", "checks": {}}

    # Store check
    try:
        await store.ping()
        details["checks"]["store"] = "ok"
    except Exception as e:
        logger.warning("health store fail", error=str(e))
        details["checks"]["store"] = f"fail: {str(e)}"
        details["status"] = "degraded"

    # Redis check, only meaningful when rate limiting runs on it
    if settings.RATE_LIMIT_ENABLED:
        try:
            if FastAPILimiter.redis is None:
                raise RuntimeError("rate limiter not initialised")
            pong = await FastAPILimiter.redis.ping()
            details["checks"]["redis"] = "ok" if pong else "fail"
        except Exception as e:
            logger.warning("health redis fail", error=str(e))
            details["checks"]["redis"] = f"fail: {str(e)}"
            details["status"] = "degraded"

    return details
