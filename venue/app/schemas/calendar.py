# venue/app/schemas/calendar.py
"""
Pydantic schemas for the calendar API.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from ..services.availability.status import DayStatus


class CalendarCellOut(BaseModel):
    """One of the 42 grid cells."""
    date: date
    is_current_month: bool
    is_today: bool
    is_past: bool
    status: Optional[DayStatus] = None  # None for padding cells
    selectable: bool

    model_config = {"from_attributes": True}


class MonthRef(BaseModel):
    year: int
    month: int


class CalendarMonthResponse(BaseModel):
    year: int
    month: int
    today: date
    prev: MonthRef
    next: MonthRef
    cells: list[CalendarCellOut]
    summary: dict[str, int]


class SlotOption(BaseModel):
    id: str
    label: str
    start: str  # HH:MM, display only
    end: str
