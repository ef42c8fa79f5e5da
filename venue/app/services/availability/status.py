# venue/app/services/availability/status.py
"""
Day status classification.

Priority (first match wins):
    past → no record → full_day → any slot taken → available
      ↓        ↓          ↓            ↓               ↓
    PAST   AVAILABLE     FULL       PARTIAL        AVAILABLE
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Mapping, Optional

SLOT_FLAGS = ("morning", "evening", "night", "short_duration")


class DayStatus(str, Enum):
    AVAILABLE = "available"
    PARTIAL = "partial"
    FULL = "full"
    PAST = "past"


@dataclass(frozen=True)
class DaySlots:
    """Per-date availability record as returned by the calendar RPC."""
    date: str  # YYYY-MM-DD
    full_day: bool = False
    morning: bool = False
    evening: bool = False
    night: bool = False
    short_duration: bool = False

    @classmethod
    def from_flags(cls, day: str, flags: Mapping) -> "DaySlots":
        """Build from a flags mapping; missing or null flags are False."""
        flags = flags or {}
        return cls(
            date=str(day)[:10],
            full_day=bool(flags.get("full_day")),
            morning=bool(flags.get("morning")),
            evening=bool(flags.get("evening")),
            night=bool(flags.get("night")),
            short_duration=bool(flags.get("short_duration")),
        )

    @property
    def any_slot_taken(self) -> bool:
        return any(getattr(self, flag) for flag in SLOT_FLAGS)

    def merge(self, other: "DaySlots") -> "DaySlots":
        """OR-merge flags of two records for the same date."""
        return DaySlots(
            date=self.date,
            full_day=self.full_day or other.full_day,
            morning=self.morning or other.morning,
            evening=self.evening or other.evening,
            night=self.night or other.night,
            short_duration=self.short_duration or other.short_duration,
        )

    def to_flags(self) -> dict:
        return {
            "full_day": self.full_day,
            "morning": self.morning,
            "evening": self.evening,
            "night": self.night,
            "short_duration": self.short_duration,
        }


def _as_date(value) -> date:
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def classify(day_slots: Optional[DaySlots], day, today) -> DayStatus:
    """
    Collapse a day's record into a single status.

    Args:
        day_slots: Record for the date, or None when nothing is recorded
        day: Date being classified (date, datetime or ISO string)
        today: Reference date; time of day is ignored
    """
    if _as_date(day) < _as_date(today):
        return DayStatus.PAST

    if day_slots is None:
        return DayStatus.AVAILABLE

    if day_slots.full_day:
        return DayStatus.FULL

    if day_slots.any_slot_taken:
        return DayStatus.PARTIAL

    return DayStatus.AVAILABLE


def is_selectable(status: Optional[DayStatus]) -> bool:
    """A date can be picked for booking only when it is available or partial."""
    return status in (DayStatus.AVAILABLE, DayStatus.PARTIAL)
