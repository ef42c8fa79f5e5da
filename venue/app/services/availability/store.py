# venue/app/services/availability/store.py
"""
Month availability cache stores.

MemoryMonthStore: per process, monotonic-clock TTL (default).
RedisMonthStore:  shared between workers.

Every month carries a generation token. delete() and clear() move it on,
and set(..., generation=token) writes only while the token is unchanged,
so a load that started before an invalidation never repopulates the cache.

Redis keys:
    calendar:month:{year}:{MM}       JSON {"YYYY-MM-DD": {"full_day": bool, ...}}, SETEX
    calendar:month:{year}:{MM}:gen   INCR on delete
    calendar:month:epoch             INCR on clear
Token = "{epoch}:{gen}".
"""

import json
import logging
import time
from typing import Callable, Optional, Protocol

from redis import Redis
from redis.exceptions import RedisError, WatchError

from .status import DaySlots

logger = logging.getLogger(__name__)

MonthMap = dict[str, DaySlots]


class MonthStore(Protocol):
    def get(self, year: int, month: int) -> Optional[MonthMap]: ...

    def generation(self, year: int, month: int) -> Optional[str]: ...

    def set(self, year: int, month: int, data: MonthMap, generation: Optional[str] = None) -> bool: ...

    def delete(self, year: int, month: int) -> int: ...

    def clear(self) -> int: ...


def month_map_to_json(data: MonthMap) -> str:
    return json.dumps({day: slots.to_flags() for day, slots in data.items()})


def month_map_from_json(raw) -> MonthMap:
    if isinstance(raw, bytes):
        raw = raw.decode()
    payload = json.loads(raw)
    return {day: DaySlots.from_flags(day, flags) for day, flags in payload.items()}


class MemoryMonthStore:
    """In-process cache with a freshness window."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[tuple[int, int], tuple[float, MonthMap]] = {}
        self._generations: dict[tuple[int, int], int] = {}
        self._epoch = 0

    def get(self, year: int, month: int) -> Optional[MonthMap]:
        """Copy of the cached map, or None on miss/expiry."""
        entry = self._entries.get((year, month))
        if entry is None:
            return None

        stored_at, data = entry
        if self.clock() - stored_at >= self.ttl_seconds:
            del self._entries[(year, month)]
            return None
        return dict(data)

    def generation(self, year: int, month: int) -> Optional[str]:
        return f"{self._epoch}:{self._generations.get((year, month), 0)}"

    def set(self, year: int, month: int, data: MonthMap, generation: Optional[str] = None) -> bool:
        if generation is not None and generation != self.generation(year, month):
            return False
        self._entries[(year, month)] = (self.clock(), dict(data))
        return True

    def delete(self, year: int, month: int) -> int:
        key = (year, month)
        self._generations[key] = self._generations.get(key, 0) + 1
        return 1 if self._entries.pop(key, None) is not None else 0

    def clear(self) -> int:
        self._epoch += 1
        count = len(self._entries)
        self._entries.clear()
        return count


class RedisMonthStore:
    """
    Redis-backed cache, shared by all workers of the site.

    Redis failures never reach the caller: a failed read is a miss, a
    failed write is skipped, and an unreadable generation disables caching
    for that load.
    """

    KEY_PREFIX = "calendar:month"
    EPOCH_KEY = f"{KEY_PREFIX}:epoch"

    def __init__(self, redis: Redis, ttl_seconds: int):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _key(self, year: int, month: int) -> str:
        return f"{self.KEY_PREFIX}:{year}:{month:02d}"

    def _gen_key(self, year: int, month: int) -> str:
        return f"{self._key(year, month)}:gen"

    def _is_month_key(self, key) -> bool:
        if isinstance(key, bytes):
            key = key.decode()
        return key != self.EPOCH_KEY and not key.endswith(":gen")

    def _token(self, client, year: int, month: int) -> str:
        epoch, gen = client.mget([self.EPOCH_KEY, self._gen_key(year, month)])
        return f"{int(epoch or 0)}:{int(gen or 0)}"

    # ── Read ─────────────────────────────────────────────────────────────

    def get(self, year: int, month: int) -> Optional[MonthMap]:
        key = self._key(year, month)
        try:
            raw = self.redis.get(key)
            if raw is None:
                return None
            try:
                return month_map_from_json(raw)
            except (ValueError, AttributeError):
                logger.warning(f"Corrupt calendar cache entry {key}, dropping")
                self.redis.delete(key)
                return None
        except RedisError as e:
            logger.warning(f"Calendar cache read {key} failed, treating as miss: {e}")
            return None

    def generation(self, year: int, month: int) -> Optional[str]:
        try:
            return self._token(self.redis, year, month)
        except RedisError as e:
            logger.warning(f"Calendar generation read {year}-{month:02d} failed: {e}")
            return None

    # ── Write ────────────────────────────────────────────────────────────

    def set(self, year: int, month: int, data: MonthMap, generation: Optional[str] = None) -> bool:
        """Write the month; with a generation token, only if it still matches."""
        if self.ttl_seconds <= 0:
            return False

        key = self._key(year, month)
        value = month_map_to_json(data)
        try:
            if generation is None:
                self.redis.setex(key, self.ttl_seconds, value)
                return True

            with self.redis.pipeline() as pipe:
                pipe.watch(self.EPOCH_KEY, self._gen_key(year, month))
                if self._token(pipe, year, month) != generation:
                    return False
                pipe.multi()
                pipe.setex(key, self.ttl_seconds, value)
                pipe.execute()
                return True

        except WatchError:
            logger.info(f"Calendar {key} invalidated while writing, not caching")
            return False
        except RedisError as e:
            logger.warning(f"Calendar cache write {key} failed, skipped: {e}")
            return False

    # ── Delete ───────────────────────────────────────────────────────────

    def delete(self, year: int, month: int) -> int:
        key = self._key(year, month)
        try:
            # generation first: a load that read the old token can no longer write
            self.redis.incr(self._gen_key(year, month))
            return self.redis.delete(key)
        except RedisError as e:
            logger.warning(f"Calendar cache delete {key} failed: {e}")
            return 0

    def clear(self) -> int:
        try:
            self.redis.incr(self.EPOCH_KEY)
            keys = [k for k in self.redis.scan_iter(f"{self.KEY_PREFIX}:*") if self._is_month_key(k)]
            if not keys:
                return 0
            return self.redis.delete(*keys)
        except RedisError as e:
            logger.warning(f"Calendar cache clear failed: {e}")
            return 0
