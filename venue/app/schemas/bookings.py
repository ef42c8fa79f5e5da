# venue/app/schemas/bookings.py
"""
Pydantic schemas for booking submission and admin booking actions.

Field rules (length, date, slot range) are checked by the booking service so
that the same messages apply to public and manual bookings.
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..services.availability.slots import event_times


class BookingRequest(BaseModel):
    """Public booking form."""
    full_name: str
    mobile: str
    email: Optional[str] = None
    booking_date: str = Field(description="YYYY-MM-DD")
    slot: str = Field("full_day", description="morning | evening | night | full_day | short_duration")
    start_time: Optional[str] = Field(None, description="HH:MM, short_duration only")
    end_time: Optional[str] = Field(None, description="HH:MM, short_duration only")
    guest_count: int = 1
    package_id: Optional[str] = None
    special_requests: Optional[str] = None
    additional_notes: Optional[str] = None


class ManualBookingRequest(BookingRequest):
    """Booking entered by an admin; confirmed unless stated otherwise."""
    status: str = "confirmed"
    event_type: str = "other"


class BookingCreated(BaseModel):
    booking: dict[str, Any]
    booking_date: date
    start_time: Optional[str] = None  # HH:MM, the slot range when the row has no times
    end_time: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict, request: BookingRequest) -> "BookingCreated":
        times = event_times(
            row.get("start_time"),
            row.get("end_time"),
            row.get("time_slot") or request.slot,
        )
        return cls(
            booking=row,
            booking_date=row.get("booking_date") or request.booking_date,
            start_time=times.start,
            end_time=times.end,
        )


class BookingActionResult(BaseModel):
    booking_id: str
    action: str
    result: Any = None


class BlockDateRequest(BaseModel):
    date: date
    reason: Optional[str] = None


class InvalidateRequest(BaseModel):
    """Months to drop from the calendar cache; no dates and no range means all."""
    dates: list[date] = []
    date_from: Optional[date] = None
    date_to: Optional[date] = None
