# venue/app/services/availability/grid.py
"""
Month grid: 6 weeks × 7 days, Sunday first.

    Su Mo Tu We Th Fr Sa
    28 29 30  1  2  3  4   ← leading days of the previous month
     5  6  7  8  9 10 11
    ...
     2  3  4  5  6  7  8   ← trailing days of the next month

Months are 1-12 everywhere in this package.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping, Optional

from .status import DaySlots, DayStatus, classify, is_selectable

GRID_WEEKS = 6
GRID_SIZE = GRID_WEEKS * 7


@dataclass(frozen=True)
class CalendarCell:
    date: date
    is_current_month: bool
    is_today: bool
    is_past: bool
    status: Optional[DayStatus]  # None only for padding cells

    @property
    def selectable(self) -> bool:
        return self.is_current_month and is_selectable(self.status)


def _check_month(year: int, month: int) -> None:
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month!r}")
    if not isinstance(year, int) or not date.min.year <= year <= date.max.year:
        raise ValueError(f"year must be in {date.min.year}..{date.max.year}, got {year!r}")


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last date of the month."""
    _check_month(year, month)
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move `delta` months forward (negative = back), rolling the year."""
    _check_month(year, month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def generate_grid(year: int, month: int) -> list[date]:
    """
    42 consecutive dates starting on the Sunday on or before the 1st.

    Raises:
        ValueError: month outside 1..12 or year outside the date range
    """
    first, _ = month_bounds(year, month)

    # weekday(): Monday=0 … Sunday=6 → days back to Sunday
    offset = (first.weekday() + 1) % 7
    try:
        start = first - timedelta(days=offset)
        return [start + timedelta(days=i) for i in range(GRID_SIZE)]
    except OverflowError as e:
        raise ValueError(f"grid for {year}-{month:02d} is outside the supported date range") from e


def is_current_month(day: date, year: int, month: int) -> bool:
    return day.year == year and day.month == month


def build_cells(
    year: int,
    month: int,
    month_map: Mapping[str, DaySlots],
    today: date,
) -> list[CalendarCell]:
    """Classify every grid date; padding cells get no status."""
    cells = []
    for day in generate_grid(year, month):
        current = is_current_month(day, year, month)
        status = classify(month_map.get(day.isoformat()), day, today) if current else None
        cells.append(CalendarCell(
            date=day,
            is_current_month=current,
            is_today=day == today,
            is_past=day < today,
            status=status,
        ))
    return cells


def month_summary(cells: list[CalendarCell]) -> dict[str, int]:
    """Count of current-month cells per status."""
    summary = {status.value: 0 for status in DayStatus}
    for cell in cells:
        if cell.is_current_month and cell.status is not None:
            summary[cell.status.value] += 1
    return summary
