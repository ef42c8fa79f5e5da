# venue/app/routers/bookings.py

from fastapi import APIRouter, Depends, HTTPException, status

from ..deps import get_booking_service
from ..errors import BookingConflictError, BookingValidationError, InvalidSlotRangeError, SupabaseError
from ..schemas.bookings import BookingCreated, BookingRequest
from ..services.bookings import BookingService

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    try:
        row = await service.create_booking(data)
    except (BookingValidationError, InvalidSlotRangeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BookingConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=e.to_dict())

    return BookingCreated.from_row(row, data)
