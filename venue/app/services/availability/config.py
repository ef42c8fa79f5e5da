# venue/app/services/availability/config.py
"""
Calendar configuration: cache freshness, retry policy, venue timezone.
"""

from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...config import settings


@dataclass(frozen=True)
class CalendarConfig:
    """
    Configuration for month availability fetching.

    Attributes:
        cache_ttl_seconds: Freshness window of a cached month
        max_retries: Retries after the first failed attempt
        backoff_base: First retry delay in seconds (doubles per attempt)
        backoff_cap: Upper bound for a single retry delay
        timezone: IANA name used to decide what "today" is
    """
    cache_ttl_seconds: int = 300
    max_retries: int = 2
    backoff_base: float = 1.0
    backoff_cap: float = 5.0
    timezone: str = "UTC"

    def __post_init__(self):
        if self.cache_ttl_seconds < 0:
            raise ValueError(f"cache_ttl_seconds must be >= 0, got {self.cache_ttl_seconds}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")

    def retry_delay(self, attempt: int) -> float:
        """
        Delay before retry number `attempt` (0-based).

        1s → 2s → 4s → 5s (capped)
        """
        return min(self.backoff_base * 2 ** attempt, self.backoff_cap)

    def tz(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return ZoneInfo("UTC")

    def today(self) -> date:
        """Current date at the venue."""
        return datetime.now(self.tz()).date()


@lru_cache
def get_calendar_config() -> CalendarConfig:
    """Get calendar configuration (singleton), built from settings."""
    return CalendarConfig(
        cache_ttl_seconds=settings.calendar_cache_ttl_seconds,
        max_retries=settings.calendar_max_retries,
        backoff_base=settings.calendar_backoff_base,
        backoff_cap=settings.calendar_backoff_cap,
        timezone=settings.venue_timezone,
    )
