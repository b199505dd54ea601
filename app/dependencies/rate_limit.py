from fastapi import Depends, Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter

from app.config import settings


def rate_limit(times: int, seconds: int):
    """
    A ``RateLimiter`` dependency that stands aside while the limiter is not
    initialised (rate limiting disabled, or the app running without its
    startup hooks).
    """
    limiter = RateLimiter(times=times, seconds=seconds)

    async def dependency(request: Request, response: Response):
        if not settings.RATE_LIMIT_ENABLED or FastAPILimiter.redis is None:
            return
        await limiter(request, response)

    return Depends(dependency)
