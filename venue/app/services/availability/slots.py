# venue/app/services/availability/slots.py
"""
Slot → time range normalization.

Two different answers for two different consumers:

  normalize_times(): what goes into the booking payload.
      morning / evening / night / full_day → (None, None),
      the database trigger assigns the canonical range.
      short_duration → explicit times or 10:00–18:00.

  display_range(): what the UI shows next to a slot label.
      Always literal HH:MM values, never sent back to the backend.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...errors import InvalidSlotRangeError

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_HHMMSS = re.compile(r"^([01]\d|2[0-3]):([0-5]\d):[0-5]\d$")

SHORT_DURATION_DEFAULT_START = "10:00"
SHORT_DURATION_DEFAULT_END = "18:00"


class SlotId(str, Enum):
    MORNING = "morning"
    EVENING = "evening"
    NIGHT = "night"
    FULL_DAY = "full_day"
    SHORT_DURATION = "short_duration"


@dataclass(frozen=True)
class TimeRange:
    start: Optional[str]
    end: Optional[str]


# Matches the backend trigger ranges
SLOT_DISPLAY_RANGES: dict[SlotId, TimeRange] = {
    SlotId.MORNING: TimeRange("10:00", "14:00"),
    SlotId.EVENING: TimeRange("14:00", "18:00"),
    SlotId.NIGHT: TimeRange("18:00", "22:00"),
    SlotId.FULL_DAY: TimeRange("10:00", "18:00"),
    SlotId.SHORT_DURATION: TimeRange(SHORT_DURATION_DEFAULT_START, SHORT_DURATION_DEFAULT_END),
}

SLOT_LABELS: dict[SlotId, str] = {
    SlotId.MORNING: "Morning",
    SlotId.EVENING: "Evening",
    SlotId.NIGHT: "Night",
    SlotId.FULL_DAY: "Full Day",
    SlotId.SHORT_DURATION: "Short Duration",
}


def parse_slot(value) -> SlotId:
    """
    Parse a slot identifier.

    Unknown or empty values fall back to FULL_DAY. The fallback is kept
    permissive on purpose and logged, see DESIGN.md (open questions).
    """
    if isinstance(value, SlotId):
        return value
    try:
        return SlotId(str(value or "").strip().lower())
    except ValueError:
        logger.warning(f"Unknown slot {value!r}, falling back to full_day")
        return SlotId.FULL_DAY


def is_valid_time(value: Optional[str]) -> bool:
    """HH:MM, 24-hour. None counts as valid (not provided)."""
    if value is None:
        return True
    return bool(_HHMM.match(value))


def normalize_time_string(value: Optional[str]) -> Optional[str]:
    """Strip seconds from HH:MM:SS; other values are returned unchanged."""
    if not value:
        return None
    if _HHMMSS.match(value):
        return value[:5]
    return value


def _checked_time(value: str, field: str) -> str:
    value = normalize_time_string(value)
    if not value or not is_valid_time(value):
        raise InvalidSlotRangeError(f"Invalid {field} time {value!r}, expected HH:MM (24-hour)")
    return value


def normalize_times(
    slot,
    explicit_start: Optional[str] = None,
    explicit_end: Optional[str] = None,
) -> TimeRange:
    """
    Convert a slot selection into the start/end values of the booking payload.

    Raises:
        InvalidSlotRangeError: short_duration with a malformed time or
            start not strictly before end.
    """
    slot_id = parse_slot(slot)

    if slot_id is not SlotId.SHORT_DURATION:
        return TimeRange(None, None)

    start = _checked_time(explicit_start or SHORT_DURATION_DEFAULT_START, "start")
    end = _checked_time(explicit_end or SHORT_DURATION_DEFAULT_END, "end")

    # zero-padded HH:MM compares correctly as text
    if start >= end:
        raise InvalidSlotRangeError(f"Start time {start} must be earlier than end time {end}")

    return TimeRange(start, end)


def display_range(slot) -> TimeRange:
    """Literal time range of a slot, for labels only."""
    return SLOT_DISPLAY_RANGES[parse_slot(slot)]


def event_times(
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    slot=None,
) -> TimeRange:
    """
    Times to show for a stored booking/event.

    Explicit times win; otherwise the slot's display range.
    """
    if start_time and end_time:
        return TimeRange(normalize_time_string(start_time), normalize_time_string(end_time))
    return display_range(slot)


def slot_options() -> list[dict]:
    """Slot choices for the booking form."""
    return [
        {
            "id": slot_id.value,
            "label": SLOT_LABELS[slot_id],
            "start": rng.start,
            "end": rng.end,
        }
        for slot_id, rng in SLOT_DISPLAY_RANGES.items()
    ]
