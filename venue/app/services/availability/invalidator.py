# venue/app/services/availability/invalidator.py
"""
Cache invalidation after booking mutations.

Triggers:
✓ Booking created (public or manual) → invalidate its month
✓ Booking confirmed / cancelled / deleted → invalidate its month
✓ Date blocked / unblocked → invalidate its month
✓ Booking rejected as a conflict → invalidate its month (UI shows true state)

Unknown booking date → invalidate every cached month.
"""

import logging
from datetime import date, datetime
from typing import Optional

from .fetcher import CalendarFetcher

logger = logging.getLogger(__name__)


def parse_booking_date(value) -> Optional[date]:
    """Date from a date, datetime or ISO string; None if unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def get_affected_months(date_start: date, date_end: date) -> list[tuple[int, int]]:
    """
    (year, month) pairs touched by the range [date_start, date_end].

    Reversed bounds are swapped.
    """
    if date_start > date_end:
        date_start, date_end = date_end, date_start

    months = []
    year, month = date_start.year, date_start.month
    while (year, month) <= (date_end.year, date_end.month):
        months.append((year, month))
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return months


def invalidate_booking_month(fetcher: CalendarFetcher, booking_date) -> None:
    """Invalidate the month of a booking date, or everything if unknown."""
    day = parse_booking_date(booking_date)
    if day is None:
        logger.warning(f"Booking date {booking_date!r} unknown, invalidating all calendar months")
        fetcher.invalidate_all()
        return
    fetcher.invalidate_date(day)


def invalidate_range(fetcher: CalendarFetcher, date_start: date, date_end: date) -> int:
    """Invalidate every month in a date range. Returns number of months."""
    months = get_affected_months(date_start, date_end)
    for year, month in months:
        fetcher.invalidate(year, month)
    return len(months)
