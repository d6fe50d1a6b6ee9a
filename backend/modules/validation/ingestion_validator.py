"""
modules/validation/ingestion_validator.py
------------------------------------------
Caller-side precondition checks applied before a trip reaches the scheduler.

The scheduler itself only rejects a broken date range; everything here is
the host application's job, kept in one place so the API and the CLI apply
the same rules:

  Trip:
    ✓ start_date and end_date present and ISO-8601 (a time part is ignored)
    ✓ end_date >= start_date
    ✓ home_location.label non-empty
    ✓ at least one overnight stay

  POI / place coordinates (when present):
    ✓ latitude in [-90, 90], longitude in [-180, 180]

  POI:
    ✓ non-empty name
    ✓ pinned_day, if present, is an integer (out-of-range values are
      clamped later, not rejected)

Usage:
    from modules.validation import validate_trip_request, ensure_trip_request

    result = validate_trip_request(payload_dict)
    if not result.valid:
        print(result.errors)

    ensure_trip_request(trip)   # raises the matching SchedulingError
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from modules.planning.day_budget import parse_trip_window
from modules.planning.errors import InvalidTripRequest, InvalidTripWindow, NoOvernightStays
from schemas.itinerary import TripRequest


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record dict (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)

    def __bool__(self) -> bool:
        return self.valid


# ── Coordinates ────────────────────────────────────────────────────────────────

def _coordinate_errors(coords: Any, owner: str) -> list[str]:
    if coords is None:
        return []
    if not isinstance(coords, dict):
        coords = {"latitude": getattr(coords, "latitude", None),
                  "longitude": getattr(coords, "longitude", None)}
    lat, lon = coords.get("latitude"), coords.get("longitude")
    try:
        lat, lon = float(lat), float(lon)
    except (TypeError, ValueError):
        return [f"{owner}: latitude/longitude must be numeric (got lat={lat!r}, lon={lon!r})"]

    errors: list[str] = []
    if not (-90.0 <= lat <= 90.0):
        errors.append(f"{owner}: latitude={lat} is outside valid range [-90, 90]")
    if not (-180.0 <= lon <= 180.0):
        errors.append(f"{owner}: longitude={lon} is outside valid range [-180, 180]")
    return errors


# ── POI validation ─────────────────────────────────────────────────────────────

def validate_poi(record: dict[str, Any]) -> ValidationResult:
    """Validate one POI record (snake_case keys)."""
    errors: list[str] = []

    name = record.get("name", "")
    if not name or not str(name).strip():
        errors.append("POI name must not be empty or NULL")

    errors.extend(_coordinate_errors(record.get("coordinates"), f"POI {name!r}"))

    pinned = record.get("pinned_day")
    if pinned is not None:
        if isinstance(pinned, bool) or not isinstance(pinned, int):
            errors.append(f"POI {name!r}: pinned_day={pinned!r} must be an integer")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


# ── Overnight stays ────────────────────────────────────────────────────────────

def validate_overnight_stays(stays: list[dict[str, Any]]) -> ValidationResult:
    """At least one stay; each stay's coordinates in range when present."""
    errors: list[str] = []
    if not stays:
        errors.append("at least one overnight stay is required")
    for stay in stays:
        errors.extend(_coordinate_errors(stay.get("coordinates"), f"stay {stay.get('label')!r}"))
    return ValidationResult(valid=len(errors) == 0, errors=errors, record={"overnight_stays": stays})


# ── Trip validation ────────────────────────────────────────────────────────────

def validate_trip_request(record: dict[str, Any]) -> ValidationResult:
    """
    Validate a whole trip payload (snake_case keys, as produced by
    GenerateRequest.model_dump()).
    """
    errors: list[str] = []

    # ── Dates ──────────────────────────────────────────────────────────────
    start, end = record.get("start_date"), record.get("end_date")
    if not start or not end:
        errors.append("start_date and end_date are required")
    else:
        # Shared with the scheduler; a time part after the date is ignored.
        try:
            parse_trip_window(start, end)
        except InvalidTripWindow as exc:
            errors.append(exc.detail)

    # ── Home ───────────────────────────────────────────────────────────────
    home = record.get("home_location") or {}
    if not str(home.get("label") or "").strip():
        errors.append("home_location.label must not be empty")
    errors.extend(_coordinate_errors(home.get("coordinates"), "home_location"))

    # ── Overnight stays ────────────────────────────────────────────────────
    errors.extend(validate_overnight_stays(record.get("overnight_stays") or []).errors)

    # ── POIs ───────────────────────────────────────────────────────────────
    for poi in record.get("pois") or []:
        errors.extend(validate_poi(poi).errors)

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


def ensure_trip_request(trip: TripRequest) -> TripRequest:
    """
    Enforce the caller-side preconditions on an already-built TripRequest and
    raise the matching SchedulingError on the first violation.
    """
    if trip.start_date is None or trip.end_date is None:
        raise InvalidTripRequest("start_date and end_date are required")
    if trip.end_date < trip.start_date:
        raise InvalidTripWindow(
            f"end_date={trip.end_date} is before start_date={trip.start_date}"
        )
    if not trip.overnight_stays:
        raise NoOvernightStays("at least one overnight stay is required")
    if not trip.home_location.label.strip():
        raise InvalidTripRequest("home location label must not be empty")
    return trip
