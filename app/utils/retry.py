import asyncio
from functools import wraps
from typing import Tuple, Type

import structlog

logger = structlog.get_logger()


def retry(
    tries: int = 3,
    delay: float = 1,
    backoff: float = 2,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
):
    """Retry an async callable on ``exceptions``, sleeping ``delay * backoff**n`` between attempts."""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            current_delay = delay
            for attempt in range(1, tries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == tries:
                        logger.error("Giving up after retries", func=func.__name__, attempts=tries, error=str(e))
                        raise
                    logger.warning(
                        "Retry attempt failed",
                        func=func.__name__,
                        attempt=attempt,
                        retry_in=current_delay,
                        error=str(e),
                    )
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff
        return wrapper
    return decorator
