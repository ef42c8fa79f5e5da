"""
venue/app/services/bookings.py

Public booking creation.

Flow:
1. Validate the form (name, mobile, date, guests, package id)
2. Slot → start/end via normalize_times (short_duration checked here)
3. Insert into `bookings`; pricing and canonical slot times are set by
   database triggers
4. Invalidate the booking's calendar month (also on conflict, so the
   calendar shows the real state)
"""

import logging
import re
from datetime import date
from typing import Optional

from ..errors import BookingConflictError, BookingValidationError, InvalidSlotRangeError, SupabaseError
from ..schemas.bookings import BookingRequest
from ..utils.supabase import SupabaseClient
from .availability.fetcher import CalendarFetcher
from .availability.invalidator import invalidate_booking_month
from .availability.slots import SlotId, normalize_times, parse_slot

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_UUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

# Postgres unique_violation / exclusion_violation
CONFLICT_CODES = {"23505", "23P01"}
CONFLICT_MARKERS = ("already booked", "not available", "conflict")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_booking_date(value: str, today: date) -> date:
    if not value:
        raise BookingValidationError("Booking date is required")
    if not _ISO_DATE.match(value):
        raise BookingValidationError("Invalid date format. Expected YYYY-MM-DD")
    try:
        booking_date = date.fromisoformat(value)
    except ValueError:
        raise BookingValidationError("Invalid date format. Expected YYYY-MM-DD")
    if booking_date < today:
        raise BookingValidationError("Booking date must be today or in the future")
    return booking_date


def build_booking_payload(request: BookingRequest, today: date, status: str = "pending") -> dict:
    """
    Validate a booking form and build the insert payload.

    Raises:
        BookingValidationError: missing/invalid field
        InvalidSlotRangeError: short_duration with one side missing,
            malformed time or start not before end
    """
    full_name = (request.full_name or "").strip()
    if len(full_name) < 2:
        raise BookingValidationError("Full name is required (minimum 2 characters)")

    mobile = (request.mobile or "").strip()
    if len(mobile) < 10:
        raise BookingValidationError("Valid mobile number is required (minimum 10 digits)")

    booking_date = _parse_booking_date((request.booking_date or "").strip(), today)

    slot = parse_slot(request.slot)
    start, end = _clean(request.start_time), _clean(request.end_time)
    if slot is SlotId.SHORT_DURATION and bool(start) != bool(end):
        raise InvalidSlotRangeError("Both start and end time are required for a short duration booking")
    times = normalize_times(slot, start, end)

    if request.guest_count < 1:
        raise BookingValidationError("Guest count must be at least 1")

    package_id = _clean(request.package_id)
    if package_id and not _UUID.match(package_id):
        raise BookingValidationError("Invalid package ID format")

    return {
        "full_name": full_name,
        "mobile": mobile,
        "email": _clean(request.email),
        "booking_date": booking_date.isoformat(),
        "time_slot": slot.value,
        "start_time": times.start,
        "end_time": times.end,
        "guest_count": request.guest_count,
        "package_id": package_id,
        "special_requests": _clean(request.special_requests),
        "additional_notes": _clean(request.additional_notes),
        "status": status,
    }


def is_conflict(error: SupabaseError) -> bool:
    """Backend rejection meaning the date/slot is no longer free."""
    if error.status == 409 or error.code in CONFLICT_CODES:
        return True
    text = " ".join(filter(None, [error.message, error.details, error.hint])).lower()
    return any(marker in text for marker in CONFLICT_MARKERS)


class BookingService:
    """Creates bookings and keeps the calendar cache consistent."""

    TABLE = "bookings"

    def __init__(self, client: SupabaseClient, fetcher: CalendarFetcher):
        self.client = client
        self.fetcher = fetcher

    async def insert_booking(self, payload: dict) -> dict:
        """
        Insert a prepared payload.

        Raises:
            BookingConflictError: date/slot taken (message from the backend)
            SupabaseError: any other backend failure
        """
        booking_date = payload["booking_date"]
        try:
            row = await self.client.insert(self.TABLE, payload)
        except SupabaseError as e:
            if is_conflict(e):
                logger.info(f"Booking conflict on {booking_date}: {e.message}")
                invalidate_booking_month(self.fetcher, booking_date)
                raise BookingConflictError(e.message, booking_date=booking_date) from e
            raise

        invalidate_booking_month(self.fetcher, booking_date)
        logger.info(f"Booking created: id={row.get('id') if row else None} date={booking_date} slot={payload.get('time_slot')}")
        return row or {}

    async def create_booking(self, request: BookingRequest) -> dict:
        """Validate, normalize and insert a public booking (status=pending)."""
        payload = build_booking_payload(request, self.fetcher.config.today())
        return await self.insert_booking(payload)
