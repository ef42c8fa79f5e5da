# venue/app/errors.py
"""
Error taxonomy.

Only CalendarFetchError reaches the user as a retryable state; the rest are
validation or backend rejections surfaced once.
"""

from typing import Optional


class VenueError(Exception):
    """Base class for all errors raised by this service."""


class SupabaseError(VenueError):
    """Remote database call failed (HTTP error or PostgREST error body)."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status = status

    @classmethod
    def from_response(cls, status: int, body) -> "SupabaseError":
        """Build from a PostgREST error payload (dict) or plain text."""
        if isinstance(body, dict):
            return cls(
                message=body.get("message") or body.get("error_description") or f"HTTP {status}",
                code=body.get("code"),
                details=body.get("details"),
                hint=body.get("hint"),
                status=status,
            )
        text = str(body or "").strip()
        return cls(message=text[:200] or f"HTTP {status}", status=status)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "hint": self.hint,
        }


class CalendarFetchError(VenueError):
    """Month availability could not be loaded after retries."""

    def __init__(self, year: int, month: int, message: str = ""):
        self.year = year
        self.month = month
        super().__init__(message or f"Failed to load calendar for {year}-{month:02d}")


class InvalidSlotRangeError(VenueError, ValueError):
    """Short-duration slot with a missing, malformed or inverted time range."""


class BookingValidationError(VenueError, ValueError):
    """Booking form failed client-side validation."""


class BookingConflictError(VenueError):
    """Backend rejected a booking because the date/slot is taken."""

    def __init__(self, message: str, booking_date=None):
        super().__init__(message)
        self.message = message
        self.booking_date = booking_date
