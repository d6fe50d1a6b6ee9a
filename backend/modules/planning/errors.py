"""
modules/planning/errors.py
--------------------------
Failures that abort itinerary generation.

Only structurally invalid input is fatal. Everything else in the POI and
location data (missing coordinates, orphaned secondaries, out-of-range pins,
too little capacity) is absorbed by a fallback inside the scheduler.

Messages carry an ERROR_<CODE> prefix so callers can match on them.
"""

from __future__ import annotations


class SchedulingError(ValueError):
    """Base class; the message is safe to show to the user as-is."""

    code: str = "ERROR_SCHEDULING"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"{self.code}: {detail}")


class InvalidTripWindow(SchedulingError):
    """End date before start date, or a day count that is not a finite integer."""

    code = "ERROR_INVALID_TRIP_WINDOW"


class NoOvernightStays(SchedulingError):
    """Raised by the caller-side precondition check, never by the core."""

    code = "ERROR_NO_OVERNIGHT_STAYS"


class InvalidTripRequest(SchedulingError):
    """Any other caller-side precondition (missing dates, empty home label)."""

    code = "ERROR_INVALID_TRIP_REQUEST"
