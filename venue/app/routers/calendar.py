# venue/app/routers/calendar.py
"""
Calendar API endpoints.

GET /calendar/slots            - Bookable slots with display times
GET /calendar/{year}/{month}   - 42-cell month grid with day statuses
"""

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_fetcher
from ..schemas.calendar import CalendarCellOut, CalendarMonthResponse, MonthRef, SlotOption
from ..services.availability import CalendarFetcher, CalendarView, ViewState, shift_month
from ..services.availability.slots import slot_options

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/slots", response_model=list[SlotOption])
def get_slot_options():
    return slot_options()


@router.get("/{year}/{month}", response_model=CalendarMonthResponse)
async def get_calendar_month(
    year: int,
    month: int,
    fetcher: CalendarFetcher = Depends(get_fetcher),
):
    """Month grid (months are 1-12). Past dates are never selectable."""
    view = CalendarView(fetcher)
    try:
        await view.show(year, month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if view.state is ViewState.ERROR:
        raise HTTPException(
            status_code=503,
            detail={"message": view.error, "retryable": True},
        )

    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)

    return CalendarMonthResponse(
        year=year,
        month=month,
        today=view.today(),
        prev=MonthRef(year=prev_year, month=prev_month),
        next=MonthRef(year=next_year, month=next_month),
        cells=[CalendarCellOut.model_validate(cell) for cell in view.cells],
        summary=view.summary(),
    )
