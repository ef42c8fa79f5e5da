# venue/app/routers/admin.py
"""
Admin endpoints. Authentication is done upstream; the acting admin is
passed in X-Admin-Id and recorded in booking_actions.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_admin_id, get_admin_service, get_fetcher
from ..errors import BookingConflictError, BookingValidationError, InvalidSlotRangeError, SupabaseError
from ..schemas.bookings import (
    BlockDateRequest,
    BookingActionResult,
    BookingCreated,
    InvalidateRequest,
    ManualBookingRequest,
)
from ..services.admin import AdminService
from ..services.availability import CalendarFetcher
from ..services.availability.invalidator import invalidate_range

router = APIRouter(prefix="/admin", tags=["admin"])


def _backend_error(e: SupabaseError) -> HTTPException:
    # 4xx from the database RPCs carry a user-facing message (bad transition etc.)
    if e.status is not None and 400 <= e.status < 500:
        return HTTPException(status_code=400, detail=e.message)
    return HTTPException(status_code=502, detail=e.to_dict())


# ── Bookings ─────────────────────────────────────────────────────────────

@router.post("/bookings/manual", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def create_manual_booking(
    data: ManualBookingRequest,
    admin_id: str = Depends(get_admin_id),
    service: AdminService = Depends(get_admin_service),
):
    try:
        row = await service.create_manual_booking(data)
    except (BookingValidationError, InvalidSlotRangeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BookingConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except SupabaseError as e:
        raise _backend_error(e)

    return BookingCreated.from_row(row, data)


@router.post("/bookings/{booking_id}/confirm", response_model=BookingActionResult)
async def confirm_booking(
    booking_id: str,
    admin_id: str = Depends(get_admin_id),
    service: AdminService = Depends(get_admin_service),
):
    try:
        result = await service.confirm_booking(booking_id, admin_id)
    except SupabaseError as e:
        raise _backend_error(e)
    return BookingActionResult(booking_id=booking_id, action="confirm", result=result)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingActionResult)
async def cancel_booking(
    booking_id: str,
    admin_id: str = Depends(get_admin_id),
    service: AdminService = Depends(get_admin_service),
):
    try:
        result = await service.cancel_booking(booking_id, admin_id)
    except SupabaseError as e:
        raise _backend_error(e)
    return BookingActionResult(booking_id=booking_id, action="cancel", result=result)


@router.delete("/bookings/{booking_id}", response_model=BookingActionResult)
async def delete_booking(
    booking_id: str,
    admin_id: str = Depends(get_admin_id),
    service: AdminService = Depends(get_admin_service),
):
    try:
        deleted = await service.delete_booking(booking_id, admin_id)
    except SupabaseError as e:
        raise _backend_error(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Not found")
    return BookingActionResult(booking_id=booking_id, action="delete", result=True)


@router.get("/bookings/{booking_id}/actions")
async def get_booking_actions(
    booking_id: str,
    admin_id: str = Depends(get_admin_id),
    service: AdminService = Depends(get_admin_service),
):
    try:
        return await service.booking_actions(booking_id)
    except SupabaseError as e:
        raise _backend_error(e)


# ── Calendar ─────────────────────────────────────────────────────────────

@router.post("/calendar/block", status_code=status.HTTP_201_CREATED)
async def block_date(
    data: BlockDateRequest,
    admin_id: str = Depends(get_admin_id),
    service: AdminService = Depends(get_admin_service),
):
    try:
        event = await service.block_date(data.date, admin_id, data.reason)
    except SupabaseError as e:
        raise _backend_error(e)
    return {"date": data.date.isoformat(), "event": event}


@router.delete("/calendar/block/{day}")
async def unblock_date(
    day: date,
    admin_id: str = Depends(get_admin_id),
    service: AdminService = Depends(get_admin_service),
):
    try:
        removed = await service.unblock_date(day, admin_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SupabaseError as e:
        raise _backend_error(e)
    return {"date": day.isoformat(), "removed": removed}


@router.post("/calendar/invalidate")
def invalidate_calendar_cache(
    data: InvalidateRequest,
    admin_id: str = Depends(get_admin_id),
    fetcher: CalendarFetcher = Depends(get_fetcher),
):
    """Manually drop cached months: given dates, a date range, or all of them."""
    if (data.date_from is None) != (data.date_to is None):
        raise HTTPException(status_code=400, detail="date_from and date_to must be given together")

    range_months = 0
    if data.dates:
        fetcher.invalidate_dates(data.dates)
    if data.date_from is not None:
        range_months = invalidate_range(fetcher, data.date_from, data.date_to)
    if not data.dates and data.date_from is None:
        fetcher.invalidate_all()
        return {"dates": "all", "range_months": 0}

    return {
        "dates": [d.isoformat() for d in data.dates],
        "range_months": range_months,
    }
