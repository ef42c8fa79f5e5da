# venue/app/services/availability/view.py
"""
Calendar view state.

    idle ──show()──→ loading ──→ ready
                        │   ↖──────┘  next/prev/refresh
                        └──→ error ──retry()──→ loading

Every load is tagged (sequence number + month). Only the latest tag may
commit, so a slow response for a month the user already left is dropped.
"""

import logging
from datetime import date
from enum import Enum
from typing import Callable, Optional

from ...errors import CalendarFetchError
from .fetcher import CalendarFetcher
from .grid import CalendarCell, build_cells, month_summary, shift_month


class ViewState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class CalendarView:
    """Month calendar with navigation and date selection."""

    def __init__(
        self,
        fetcher: CalendarFetcher,
        today: Optional[Callable[[], date]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.fetcher = fetcher
        self.today = today or fetcher.config.today
        self.logger = logger or logging.getLogger(__name__)

        self.state = ViewState.IDLE
        self.year: Optional[int] = None
        self.month: Optional[int] = None
        self.cells: list[CalendarCell] = []
        self.error: Optional[str] = None
        self.selected_date: Optional[date] = None
        self._seq = 0

    # ── Loading ──────────────────────────────────────────────────────────

    async def show(self, year: Optional[int] = None, month: Optional[int] = None) -> bool:
        """
        Display a month (defaults to the current one).

        Returns:
            True if this load committed, False if a newer load superseded it.
        """
        if year is None or month is None:
            current = self.today()
            year, month = current.year, current.month
        shift_month(year, month, 0)  # validates

        self._seq += 1
        seq = self._seq
        if (year, month) != (self.year, self.month):
            self.selected_date = None
        self.year, self.month = year, month
        self.state = ViewState.LOADING
        self.error = None

        try:
            data = await self.fetcher.fetch_month(year, month)
        except Exception as e:
            if not self._is_current(seq, year, month):
                self.logger.debug(f"Discarding stale error for {year}-{month:02d}")
                return False
            if not isinstance(e, CalendarFetchError):
                self.logger.exception(f"Unexpected error loading calendar {year}-{month:02d}")
            self.state = ViewState.ERROR
            self.error = str(e)
            self.cells = []
            return True

        if not self._is_current(seq, year, month):
            self.logger.debug(f"Discarding stale response for {year}-{month:02d}")
            return False

        self.cells = build_cells(year, month, data, self.today())
        self.state = ViewState.READY
        return True

    def _is_current(self, seq: int, year: int, month: int) -> bool:
        return seq == self._seq and (year, month) == (self.year, self.month)

    async def next_month(self) -> bool:
        return await self._navigate(1)

    async def prev_month(self) -> bool:
        return await self._navigate(-1)

    async def _navigate(self, delta: int) -> bool:
        if self.year is None:
            return await self.show()
        year, month = shift_month(self.year, self.month, delta)
        return await self.show(year, month)

    async def retry(self) -> bool:
        """Reload the displayed month (after an error)."""
        return await self.show(self.year, self.month)

    async def refresh(self) -> bool:
        """Invalidate the displayed month and reload it (after a mutation)."""
        if self.year is None:
            return await self.show()
        self.fetcher.invalidate(self.year, self.month)
        return await self.show(self.year, self.month)

    # ── Selection ────────────────────────────────────────────────────────

    def cell_for(self, day: date) -> Optional[CalendarCell]:
        for cell in self.cells:
            if cell.date == day:
                return cell
        return None

    def select(self, day: date) -> bool:
        """Select a date; full, past and out-of-month cells are rejected."""
        if self.state is not ViewState.READY:
            return False
        cell = self.cell_for(day)
        if cell is None or not cell.selectable:
            return False
        self.selected_date = day
        return True

    def summary(self) -> dict[str, int]:
        return month_summary(self.cells)
