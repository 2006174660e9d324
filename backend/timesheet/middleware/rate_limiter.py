from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from fastapi.responses import JSONResponse
import os
import time
import logging

logger = logging.getLogger(__name__)


def _too_many_requests() -> JSONResponse:
    return JSONResponse(status_code=429, content={"detail": "Too Many Requests"})


class RateLimiterMiddleware(BaseHTTPMiddleware):
    """Simple IP-based rate limiter.

    Production – uses Redis for distributed rate limiting (set REDIS_URL).
    Development – falls back to in-process dictionary so devs don't have to
    run Redis locally.
    """

    _local_cache: dict[str, list[float]] = {}
    _redis_unavailable: bool = False  # Cache Redis health to avoid log spam

    async def _redis_limited(self, redis_url: str, client_ip: str, limit: int, window_seconds: int) -> bool:
        from redis import asyncio as aioredis  # Local import so project still works w/o Redis

        redis = aioredis.from_url(redis_url)
        key = f"rate:{client_ip}"
        try:
            current = await redis.get(key)
            if current and int(current) >= limit:
                return True

            async with redis.pipeline(transaction=True) as tx:
                tx.incr(key)
                tx.expire(key, window_seconds)
                await tx.execute()
            return False
        finally:
            await redis.aclose()

    async def dispatch(self, request: Request, call_next):
        if os.getenv("DISABLE_RATE_LIMIT", "0") == "1":
            return await call_next(request)

        # CORS pre-flight requests are never limited
        if request.method == "OPTIONS":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        limit = int(os.getenv("RATE_LIMIT", "240"))
        window_seconds = int(os.getenv("RATE_LIMIT_WINDOW", "60"))

        redis_url = os.getenv("REDIS_URL")

        # ------------------------------------------------------------------
        # Redis-backed strategy (preferred for multi-instance deployments)
        # ------------------------------------------------------------------
        if redis_url and not self._redis_unavailable:
            try:
                limited = await self._redis_limited(redis_url, client_ip, limit, window_seconds)
            except Exception as exc:  # noqa: broad-except (Redis down/etc.)
                logger.warning(
                    "RateLimiter: Redis unavailable – falling back to in-memory store (%s)",
                    exc,
                )
                type(self)._redis_unavailable = True
            else:
                if limited:
                    return _too_many_requests()
                return await call_next(request)

        # ------------------------------------------------------------------
        # In-memory fallback (single-instance / development only)
        # ------------------------------------------------------------------
        now = time.time()
        window_start = now - window_seconds

        timestamps = [ts for ts in self._local_cache.get(client_ip, []) if ts > window_start]

        if len(timestamps) >= limit:
            self._local_cache[client_ip] = timestamps
            return _too_many_requests()

        timestamps.append(now)
        self._local_cache[client_ip] = timestamps

        return await call_next(request)
