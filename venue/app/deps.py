# venue/app/deps.py
"""
FastAPI dependencies. Services are built once in the app lifespan and kept
on app.state.
"""

from typing import Optional

from fastapi import Header, HTTPException, Request

from .services.admin import AdminService
from .services.availability import CalendarFetcher
from .services.bookings import BookingService


def get_fetcher(request: Request) -> CalendarFetcher:
    return request.app.state.fetcher


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


def get_admin_service(request: Request) -> AdminService:
    return request.app.state.admin_service


def get_admin_id(x_admin_id: Optional[str] = Header(None)) -> str:
    """Acting admin, taken from X-Admin-Id (authentication happens upstream)."""
    if x_admin_id is None:
        raise HTTPException(status_code=401, detail="X-Admin-Id header required")
    admin_id = x_admin_id.strip()
    if not admin_id:
        raise HTTPException(status_code=400, detail="X-Admin-Id header is empty")
    return admin_id
