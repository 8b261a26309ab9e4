"""
Rate Limiting

Fixed-window request counters kept in Redis, shared by every worker
process. The limiter is constructed by the application lifespan and
reached through ``app.state``; there is no process-wide instance.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import Request

from hostel_allocation.core.exceptions import RateLimitExceeded
from hostel_allocation.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitResult:
    """Rate limit check result"""
    allowed: bool
    limit: int
    remaining: int
    retry_after: int
    total_hits: int
    key: str


class RateLimiter:
    """
    Counts hits per ``(scope, identifier)`` in a TTL-bearing Redis key.

    The first hit of a window creates the key with the window as TTL;
    the key disappears when the window ends, resetting the budget.
    """

    def __init__(self, redis_client: redis.Redis, limit: int = 20, window_seconds: int = 60):
        self.redis = redis_client
        self.limit = limit
        self.window_seconds = window_seconds

    @staticmethod
    def key_for(scope: str, identifier: str) -> str:
        return f"rate_limit:{scope}:{identifier}"

    async def hit(self, scope: str, identifier: str) -> RateLimitResult:
        key = self.key_for(scope, identifier)
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.ttl(key)
                count, ttl = await pipe.execute()

            if ttl is None or ttl < 0:
                await self.redis.expire(key, self.window_seconds)
                ttl = self.window_seconds
        except RedisError as e:
            # Fail open: an unavailable counter store must not block students
            logger.error(f"Rate limit check failed: {str(e)}", extra={"rate_limit_key": key})
            return RateLimitResult(
                allowed=True,
                limit=self.limit,
                remaining=self.limit,
                retry_after=0,
                total_hits=0,
                key=key,
            )

        count = int(count)
        allowed = count <= self.limit
        return RateLimitResult(
            allowed=allowed,
            limit=self.limit,
            remaining=max(self.limit - count, 0),
            retry_after=0 if allowed else int(ttl),
            total_hits=count,
            key=key,
        )


def extract_identifier(request: Request) -> str:
    """Authenticated user id when the gateway forwards one, otherwise the client IP"""
    user_id = request.headers.get("X-User-Id")
    if user_id:
        return f"user:{user_id}"
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return f"ip:{forwarded_for.split(',')[0].strip()}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


def rate_limit(scope: str) -> Callable:
    """
    FastAPI dependency factory enforcing the app's limiter for ``scope``.

    Usage:
        @router.post("/", dependencies=[Depends(rate_limit("application_submit"))])
    """

    async def dependency(request: Request) -> Optional[RateLimitResult]:
        limiter: Optional[RateLimiter] = getattr(request.app.state, "rate_limiter", None)
        if limiter is None:
            return None

        result = await limiter.hit(scope, extract_identifier(request))
        if not result.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"rate_limit_key": result.key, "total_hits": result.total_hits},
            )
            raise RateLimitExceeded(retry_after=result.retry_after, limit=result.limit)
        return result

    return dependency


__all__ = ["RateLimiter", "RateLimitResult", "extract_identifier", "rate_limit"]
