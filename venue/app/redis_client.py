# venue/app/redis_client.py
"""
Optional Redis connection (shared calendar cache, rate limiting).

None when REDIS_URL is not configured: the site then runs with an
in-process cache and without rate limiting.
"""

from typing import Optional

from redis import Redis

from .config import settings

REDIS_SOCKET_TIMEOUT = 2.0


def create_redis_client(url: Optional[str]) -> Optional[Redis]:
    if not url:
        return None
    return Redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=REDIS_SOCKET_TIMEOUT,
    )


redis_client = create_redis_client(settings.redis_url)
