# venue/app/middleware/rate_limit.py
"""
Rate limiting for write requests (booking submission, admin actions).

Fixed window per client IP, counted in Redis:
    rl:ip:{ip}  INCR, EXPIRE window on first hit

No Redis → no limit. Redis errors → fail open.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from .. import redis_client as redis_module
from .audit import client_ip

logger = logging.getLogger(__name__)


RATE_LIMITS = {
    "ip": {"limit": 20, "window": 60},
}

LIMITED_METHODS = {"POST"}


def _check_limit(redis, key: str, limit: int, window: int) -> tuple[bool, Optional[int]]:
    """
    Returns (allowed, retry_after).

    limit=0 means disabled.
    """
    if redis is None or limit <= 0:
        return True, None

    try:
        pipe = redis.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        if ttl == -1:
            redis.expire(key, window)
            ttl = window

        if count > limit:
            return False, ttl

        return True, None

    except Exception as e:
        logger.error(f"Rate limit check failed: {e}")
        return True, None  # fail open


def check_rate_limit(redis, key_type: str, key_value: str) -> tuple[bool, Optional[int]]:
    config = RATE_LIMITS.get(key_type)
    if not config:
        return True, None

    key = f"rl:{key_type}:{key_value}"
    return _check_limit(redis, key, config["limit"], config["window"])


async def rate_limit_middleware(request: Request, call_next):
    if request.method not in LIMITED_METHODS:
        return await call_next(request)

    allowed, retry = check_rate_limit(redis_module.redis_client, "ip", client_ip(request))
    if not allowed:
        logger.warning(f"Rate limit exceeded: ip={client_ip(request)} path={request.url.path}")
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded"},
            headers={"Retry-After": str(retry or 1)},
        )

    return await call_next(request)
