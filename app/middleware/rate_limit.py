import logging
import time

from fastapi import Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.exceptions import CODE_RATE_LIMITED

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-backed sliding window rate limiter, keyed by client IP."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        redis_client = getattr(request.app.state, "redis", None)
        if redis_client is None:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key = f"rate_limit:{client_ip}"

        try:
            now = time.time()
            pipe = redis_client.pipeline()
            # Drop entries that left the window
            pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
            pipe.zadd(key, {str(now): now})
            pipe.zcard(key)
            pipe.expire(key, WINDOW_SECONDS)
            results = await pipe.execute()
        except RedisError as exc:
            # Limiter unavailable, let the report through
            logger.warning("Rate limiter unavailable: %s", exc)
            return await call_next(request)

        if results[2] > settings.RATE_LIMIT_PER_MINUTE:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "code": CODE_RATE_LIMITED,
                    "message": "Rate limit exceeded. Try again later.",
                },
            )

        return await call_next(request)
