# venue/app/services/availability/fetcher.py
"""
Month availability fetcher.

    fetch_month(year, month)
        │
        ├─ cache hit (fresh)          → cached map
        ├─ load in flight for key     → await the same task
        └─ new load (tagged with the key's generation)
              attempt: primary RPC ── empty? ──→ fallback range query
              error:   retry ×max_retries, delay min(base·2^n, cap)
              done:    store in cache only if generation unchanged

invalidate() moves the store generation on (shared between workers when the
store is Redis) and detaches the in-flight task, so the next read after a
mutation always goes to the network.
"""

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, Iterable, Optional

from ...errors import CalendarFetchError
from .config import CalendarConfig, get_calendar_config
from .grid import month_bounds
from .sources import CalendarSource
from .store import MemoryMonthStore, MonthMap, MonthStore

MonthKey = tuple[int, int]


class CalendarFetcher:
    """Loads month availability maps with fallback, retry, cache and dedup."""

    def __init__(
        self,
        source: CalendarSource,
        store: Optional[MonthStore] = None,
        config: Optional[CalendarConfig] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.source = source
        self.config = config or get_calendar_config()
        self.store = store if store is not None else MemoryMonthStore(self.config.cache_ttl_seconds)
        self.logger = logger or logging.getLogger(__name__)
        self.sleep = sleep
        self._inflight: dict[MonthKey, asyncio.Task] = {}

    # ── Read ─────────────────────────────────────────────────────────────

    async def fetch_month(self, year: int, month: int) -> MonthMap:
        """
        Availability map for the month, keyed by ISO date.

        Raises:
            ValueError: invalid year/month
            CalendarFetchError: all attempts failed
        """
        month_bounds(year, month)
        key = (year, month)

        cached = self.store.get(year, month)
        if cached is not None:
            self.logger.debug(f"Calendar cache hit {year}-{month:02d}")
            return cached

        task = self._inflight.get(key)
        if task is None:
            # read before the request, so an invalidation during the load wins
            generation = self.store.generation(year, month)
            task = asyncio.ensure_future(self._load(key, generation))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._release(k, t))
        else:
            self.logger.debug(f"Joining in-flight calendar load {year}-{month:02d}")

        # a cancelled caller must not cancel the load other callers share
        return await asyncio.shield(task)

    def _release(self, key: MonthKey, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # mark the exception retrieved when no caller is left waiting
            task.exception()

    async def _load(self, key: MonthKey, generation: Optional[str]) -> MonthMap:
        year, month = key
        attempts = self.config.max_retries + 1
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                data = await self._attempt(year, month)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                last_error = e
                if attempt + 1 >= attempts:
                    break
                delay = self.config.retry_delay(attempt)
                self.logger.warning(
                    f"Calendar load {year}-{month:02d} failed (attempt {attempt + 1}/{attempts}): {e}; "
                    f"retrying in {delay:.1f}s"
                )
                await self.sleep(delay)
                continue

            if generation is None or not self.store.set(year, month, data, generation=generation):
                self.logger.debug(f"Calendar {year}-{month:02d} not cached (invalidated during load or cache unavailable)")
            return data

        self.logger.error(f"Calendar load {year}-{month:02d} failed after {attempts} attempts: {last_error}")
        raise CalendarFetchError(year, month, f"Failed to load calendar for {year}-{month:02d}: {last_error}") from last_error

    async def _attempt(self, year: int, month: int) -> MonthMap:
        self.logger.info(f"Fetching calendar {year}-{month:02d}")
        data = await self.source.get_calendar_month(year, month)
        if data:
            return data

        start, end = month_bounds(year, month)
        self.logger.warning(f"Calendar RPC returned no data for {year}-{month:02d}, using range fallback")
        return await self.source.get_availability_range(start, end)

    # ── Invalidate ───────────────────────────────────────────────────────

    def invalidate(self, year: int, month: int) -> None:
        """Drop the cached month; the next read issues a fresh request."""
        self._inflight.pop((year, month), None)
        self.store.delete(year, month)
        self.logger.info(f"Calendar {year}-{month:02d} invalidated")

    def invalidate_date(self, day: date) -> None:
        self.invalidate(day.year, day.month)

    def invalidate_dates(self, days: Iterable[date]) -> None:
        for year, month in sorted({(d.year, d.month) for d in days}):
            self.invalidate(year, month)

    def invalidate_all(self) -> None:
        self._inflight.clear()
        self.store.clear()
        self.logger.info("Calendar cache cleared")
