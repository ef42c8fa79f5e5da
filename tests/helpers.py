"""Test doubles shared by the test modules."""

import asyncio
import fnmatch
from datetime import date

from redis.exceptions import ConnectionError as RedisConnectionError, WatchError

from venue.app.services.availability.status import DaySlots


def month_map(**days):
    """month_map(d_2025_03_15={"full_day": True}) → {"2025-03-15": DaySlots(...)}"""
    result = {}
    for name, flags in days.items():
        day = name[2:].replace("_", "-")
        result[day] = DaySlots.from_flags(day, flags)
    return result


class StubSource:
    """Calendar source returning scripted results, recording every call."""

    def __init__(self, primary=None, fallback=None, fail_times=0, error=None, delay=0):
        self.primary = primary or {}
        self.fallback = fallback or {}
        self.fail_times = fail_times
        self.error = error or ConnectionError("network down")
        self.delay = delay
        self.primary_calls = []
        self.fallback_calls = []

    async def get_calendar_month(self, year, month):
        self.primary_calls.append((year, month))
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise self.error
        return self.primary.get((year, month), {})

    async def get_availability_range(self, start: date, end: date):
        self.fallback_calls.append((start, end))
        await asyncio.sleep(0)
        return self.fallback


class FakeRedis:
    """In-memory subset of the redis-py client used by the stores and the rate limiter."""

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.versions = {}

    def _touch(self, key):
        self.versions[key] = self.versions.get(key, 0) + 1

    def get(self, key):
        return self.data.get(key)

    def mget(self, keys):
        return [self.data.get(key) for key in keys]

    def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl
        self._touch(key)

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.ttls.pop(key, None)
                self._touch(key)
                removed += 1
        return removed

    def scan_iter(self, pattern):
        return [key for key in list(self.data) if fnmatch.fnmatch(key, pattern)]

    def incr(self, key):
        self.data[key] = int(self.data.get(key, 0)) + 1
        self._touch(key)
        return self.data[key]

    def ttl(self, key):
        return self.ttls.get(key, -1)

    def expire(self, key, seconds):
        self.ttls[key] = seconds

    def ping(self):
        return True

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    """
    Queued commands, WATCH/MULTI/EXEC semantics: after watch() commands run
    immediately until multi(); execute() raises WatchError if a watched key
    was written in between.
    """

    def __init__(self, redis):
        self.redis = redis
        self.queue = []
        self.watched = {}
        self.immediate = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.reset()

    def reset(self):
        self.queue = []
        self.watched = {}
        self.immediate = False

    def watch(self, *keys):
        self.watched = {key: self.redis.versions.get(key, 0) for key in keys}
        self.immediate = True

    def multi(self):
        self.immediate = False

    def __getattr__(self, name):
        command = getattr(self.redis, name)

        def call(*args):
            if self.immediate:
                return command(*args)
            self.queue.append((command, args))
            return self

        return call

    def execute(self):
        changed = any(self.redis.versions.get(key, 0) != version for key, version in self.watched.items())
        queue = self.queue
        self.reset()
        if changed:
            raise WatchError("Watched variable changed.")
        return [command(*args) for command, args in queue]


class BrokenRedis:
    """Every command fails as if the server were unreachable."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise RedisConnectionError("redis down")

        return fail
