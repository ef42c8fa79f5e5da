# venue/app/services/availability/sources.py
"""
Remote sources of month availability.

Primary:  RPC get_calendar_month(p_year, p_month) → {"YYYY-MM-DD": {flags}}
Fallback: public_availability view, one row per date (or per booking)
"""

from datetime import date
from typing import Protocol

from ...utils.supabase import SupabaseClient
from .status import DaySlots
from .store import MonthMap


class CalendarSource(Protocol):
    async def get_calendar_month(self, year: int, month: int) -> MonthMap: ...

    async def get_availability_range(self, start: date, end: date) -> MonthMap: ...


def month_map_from_rpc(data) -> MonthMap:
    """Normalize the RPC jsonb payload; null or non-object means no data."""
    if not isinstance(data, dict):
        return {}
    return {
        str(day)[:10]: DaySlots.from_flags(day, flags if isinstance(flags, dict) else {})
        for day, flags in data.items()
    }


def month_map_from_rows(rows) -> MonthMap:
    """Regroup view rows by date; flags of duplicate dates are OR-ed."""
    result: MonthMap = {}
    for row in rows or []:
        day = row.get("date")
        if not day:
            continue
        slots = DaySlots.from_flags(day, row)
        existing = result.get(slots.date)
        result[slots.date] = existing.merge(slots) if existing else slots
    return result


class SupabaseCalendarSource:
    """Calendar source backed by the venue database."""

    MONTH_RPC = "get_calendar_month"
    FALLBACK_VIEW = "public_availability"

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def get_calendar_month(self, year: int, month: int) -> MonthMap:
        # backend signature: get_calendar_month(p_year integer, p_month integer) -> jsonb
        data = await self.client.rpc(self.MONTH_RPC, {"p_year": year, "p_month": month})
        return month_map_from_rpc(data)

    async def get_availability_range(self, start: date, end: date) -> MonthMap:
        rows = await self.client.select(
            self.FALLBACK_VIEW,
            filters=[
                ("date", "gte", start.isoformat()),
                ("date", "lte", end.isoformat()),
            ],
        )
        return month_map_from_rows(rows)
