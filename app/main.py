import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis
from structlog import get_logger

from app.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.dependencies.store import close_store
from app.routers import auth, health, messages, properties, users
from app.utils.retry import retry

logger = get_logger()

app = FastAPI(title="Rental Marketplace API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)
app.include_router(auth.router)
app.include_router(properties.router)
app.include_router(users.router)
app.include_router(messages.router)
app.include_router(health.router)

# Static hosting for uploaded images
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@retry(tries=3, delay=1, backoff=2)
async def init_rate_limiter():
    redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    await redis.ping()
    await FastAPILimiter.init(redis)


@app.on_event("startup")
async def startup_event():
    setup_logging()
    if settings.RATE_LIMIT_ENABLED:
        await init_rate_limiter()
    logger.info("API started", store_backend=settings.STORE_BACKEND, rate_limit=settings.RATE_LIMIT_ENABLED)


@app.on_event("shutdown")
async def shutdown_event():
    if FastAPILimiter.redis is not None:
        await FastAPILimiter.close()
    await close_store()
