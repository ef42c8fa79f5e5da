"""
venue/app/services/admin.py

Admin back-office actions on bookings and the calendar.

Status transitions and the audit trail are enforced by database RPCs:
    admin_confirm_booking(p_booking_id, p_admin_id)   pending → confirmed
    admin_cancel_booking(p_booking_id, p_admin_id)    → cancelled, frees slots
    get_booking_actions(p_booking_id)                 audit rows

Every successful mutation invalidates the affected calendar month.
"""

import logging
from datetime import date
from typing import Any, Optional

from ..errors import SupabaseError
from ..schemas.bookings import ManualBookingRequest
from ..utils.supabase import SupabaseClient
from .availability.fetcher import CalendarFetcher
from .availability.invalidator import invalidate_booking_month
from .bookings import BookingService, build_booking_payload

logger = logging.getLogger(__name__)


class AdminService:
    """Booking mutations, date blocking and manual bookings."""

    BOOKINGS_TABLE = "bookings"
    EVENTS_TABLE = "events"
    ACTIONS_TABLE = "booking_actions"

    def __init__(self, client: SupabaseClient, fetcher: CalendarFetcher):
        self.client = client
        self.fetcher = fetcher
        self.bookings = BookingService(client, fetcher)

    # ------------------------------------------------------------------
    # Booking status
    # ------------------------------------------------------------------

    async def _booking_date(self, booking_id: str) -> Optional[str]:
        rows = await self.client.select(
            self.BOOKINGS_TABLE,
            columns="id,booking_date",
            filters=[("id", "eq", booking_id)],
        )
        if not rows:
            return None
        return rows[0].get("booking_date")

    async def _booking_rpc(self, fn: str, booking_id: str, admin_id: str) -> Any:
        booking_date = await self._booking_date(booking_id)
        logger.info(f"RPC {fn}: booking={booking_id} admin={admin_id}")
        result = await self.client.rpc(fn, {"p_booking_id": booking_id, "p_admin_id": admin_id})
        invalidate_booking_month(self.fetcher, booking_date)
        return result

    async def confirm_booking(self, booking_id: str, admin_id: str) -> Any:
        return await self._booking_rpc("admin_confirm_booking", booking_id, admin_id)

    async def cancel_booking(self, booking_id: str, admin_id: str) -> Any:
        return await self._booking_rpc("admin_cancel_booking", booking_id, admin_id)

    async def delete_booking(self, booking_id: str, admin_id: str) -> bool:
        """Hard delete. Returns False if the booking did not exist."""
        deleted = await self.client.delete(self.BOOKINGS_TABLE, [("id", "eq", booking_id)])
        if not deleted:
            return False

        invalidate_booking_month(self.fetcher, deleted[0].get("booking_date"))
        await self._log_action("delete_booking", admin_id, f"Deleted booking {booking_id}", booking_id=booking_id)
        return True

    async def booking_actions(self, booking_id: str) -> list[dict]:
        """Audit trail of a booking, oldest first."""
        result = await self.client.rpc("get_booking_actions", {"p_booking_id": booking_id})
        return result or []

    # ------------------------------------------------------------------
    # Manual booking
    # ------------------------------------------------------------------

    async def create_manual_booking(self, request: ManualBookingRequest) -> dict:
        """Booking entered by staff; confirmed by default."""
        payload = build_booking_payload(request, self.fetcher.config.today(), status=request.status)
        payload["event_type"] = request.event_type or "other"
        return await self.bookings.insert_booking(payload)

    # ------------------------------------------------------------------
    # Date blocking
    # ------------------------------------------------------------------

    async def _log_action(self, action: str, admin_id: str, notes: str, booking_id: Optional[str] = None) -> bool:
        """
        Append an audit row. Runs after the mutation succeeded, so a failure
        here is logged and does not fail the request.
        """
        try:
            await self.client.insert(self.ACTIONS_TABLE, {
                "booking_id": booking_id,
                "admin_id": admin_id,
                "action": action,
                "notes": notes,
            })
        except SupabaseError as e:
            logger.error(f"Audit log failed: action={action} admin={admin_id} booking={booking_id}: {e.message}")
            return False
        return True

    async def block_date(self, day: date, admin_id: str, reason: Optional[str] = None) -> dict:
        """Mark a whole date as unavailable."""
        reason = (reason or "").strip() or None
        event = await self.client.insert(self.EVENTS_TABLE, {
            "event_name": f"Blocked: {reason or 'Manual Block'}",
            "event_type": "blocked",
            "event_date": day.isoformat(),
            "status": "blocked",
            "description": reason or "Date manually blocked by admin",
        })
        self.fetcher.invalidate_date(day)
        await self._log_action(
            "block_date",
            admin_id,
            f"Blocked date: {day.isoformat()}. Reason: {reason or 'No reason provided'}",
        )
        return event or {}

    async def unblock_date(self, day: date, admin_id: str) -> int:
        """
        Remove manual blocks from a date.

        Raises:
            LookupError: the date has no blocked event
        """
        deleted = await self.client.delete(self.EVENTS_TABLE, [
            ("event_date", "eq", day.isoformat()),
            ("event_type", "eq", "blocked"),
            ("status", "eq", "blocked"),
        ])
        if not deleted:
            raise LookupError(f"No blocked event found for {day.isoformat()}")

        self.fetcher.invalidate_date(day)
        await self._log_action("unblock_date", admin_id, f"Unblocked date: {day.isoformat()}")
        return len(deleted)
