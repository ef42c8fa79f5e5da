# venue/app/services/availability/__init__.py
"""
Availability calendar module.

Pure:  slot → time range, day status, month grid
I/O:   month fetcher (fallback, retry, cache, dedup) and the view state
"""

from .config import CalendarConfig, get_calendar_config
from .slots import SlotId, TimeRange, normalize_times, display_range, parse_slot
from .status import DaySlots, DayStatus, classify, is_selectable
from .grid import CalendarCell, generate_grid, build_cells, shift_month, month_bounds
from .store import MemoryMonthStore, RedisMonthStore
from .sources import SupabaseCalendarSource
from .fetcher import CalendarFetcher
from .invalidator import invalidate_booking_month
from .view import CalendarView, ViewState

__all__ = [
    "CalendarConfig",
    "get_calendar_config",
    "SlotId",
    "TimeRange",
    "normalize_times",
    "display_range",
    "parse_slot",
    "DaySlots",
    "DayStatus",
    "classify",
    "is_selectable",
    "CalendarCell",
    "generate_grid",
    "build_cells",
    "shift_month",
    "month_bounds",
    "MemoryMonthStore",
    "RedisMonthStore",
    "SupabaseCalendarSource",
    "CalendarFetcher",
    "invalidate_booking_month",
    "CalendarView",
    "ViewState",
]
