"""
schemas/itinerary.py
--------------------
Dataclass definitions for the trip inputs and the day-by-day itinerary.

Everything here is frozen: a generated itinerary is never patched, it is
replaced wholesale on the next generation.

Units:
  durations → minutes (DayPlan, TimingBreakdown) or hours (packing)
  distances → kilometres
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Union


# ── Enumerations ──────────────────────────────────────────────────────────────

class DurationClass(str, Enum):
    QUICK = "quick"
    HALF_DAY = "half-day"
    FULL_DAY = "full-day"

    @property
    def minutes(self) -> int:
        return DURATION_MINUTES[self]

    @property
    def hours(self) -> float:
        return DURATION_MINUTES[self] / 60.0

    @classmethod
    def parse(cls, value: Optional[str]) -> "DurationClass":
        """Unknown or missing values fall back to half-day."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.HALF_DAY


# Single lookup table for activity time; every stage reads from here.
DURATION_MINUTES: dict[DurationClass, int] = {
    DurationClass.QUICK:    90,
    DurationClass.HALF_DAY: 210,
    DurationClass.FULL_DAY: 420,
}


class POIKind(str, Enum):
    MAIN = "main"
    SECONDARY = "secondary"

    @classmethod
    def parse(cls, value: Optional[str]) -> "POIKind":
        if isinstance(value, cls):
            return value
        return cls.SECONDARY if str(value).strip().lower() == "secondary" else cls.MAIN


class DayType(str, Enum):
    TRAVEL = "travel"
    MIXED = "mixed"
    TOUR = "tour"


class TravelType(str, Enum):
    DEPARTURE = "departure"
    RETURN = "return"
    ROUND_TRIP = "round-trip"
    NONE = "none"


# ── Places ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class Location:
    """A labelled place; coordinates stay None until a geocoder resolves them."""
    label: str
    coordinates: Optional[Coordinates] = None

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
        }


@dataclass(frozen=True)
class OvernightStay:
    """A Location with a stable id, cycled across the middle tour days."""
    id: str
    label: str
    coordinates: Optional[Coordinates] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
        }


Place = Union[Location, OvernightStay]


@dataclass(frozen=True)
class POI:
    """
    A point of interest.

    Secondary POIs name their main POI through related_main_name (exact,
    case-sensitive match). pinned_day is 1-based and applies to the whole
    group when set on the main POI.
    """
    id: str
    name: str
    category: str = "General"
    duration_class: DurationClass = DurationClass.HALF_DAY
    coordinates: Optional[Coordinates] = None
    kind: POIKind = POIKind.MAIN
    related_main_name: Optional[str] = None
    pinned_day: Optional[int] = None

    @property
    def minutes(self) -> int:
        return self.duration_class.minutes

    @property
    def hours(self) -> float:
        return self.duration_class.hours

    @property
    def is_secondary(self) -> bool:
        return self.kind is POIKind.SECONDARY

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "duration_class": self.duration_class.value,
            "activity_minutes": self.minutes,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
            "kind": self.kind.value,
            "related_main_name": self.related_main_name,
            "pinned_day": self.pinned_day,
        }


# ── Trip input ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TripWindow:
    start_date: date
    end_date: date

    @property
    def total_days(self) -> int:
        """Inclusive of both endpoints; may be < 1 for an inverted window."""
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class TripRequest:
    """Everything the scheduler needs; coordinates are already resolved (or None)."""
    start_date: date
    end_date: date
    home_location: Location
    overnight_stays: tuple[OvernightStay, ...]
    pois: tuple[POI, ...] = ()

    @property
    def window(self) -> TripWindow:
        return TripWindow(self.start_date, self.end_date)


# ── Itinerary output ──────────────────────────────────────────────────────────

def _place_dict(place: Optional[Place]) -> Optional[dict]:
    return place.to_dict() if place is not None else None


@dataclass(frozen=True)
class Route:
    from_: Place
    to: Place

    def to_dict(self) -> dict:
        return {"from": _place_dict(self.from_), "to": _place_dict(self.to)}


@dataclass(frozen=True)
class TimingBreakdown:
    """The three minute buckets always sum to the day's estimated duration."""
    travel_minutes: int = 0
    activity_minutes: int = 0
    local_travel_minutes: int = 0
    travel_type: TravelType = TravelType.NONE

    @property
    def total_minutes(self) -> int:
        return self.travel_minutes + self.activity_minutes + self.local_travel_minutes

    def to_dict(self) -> dict:
        return {
            "travel_minutes": self.travel_minutes,
            "activity_minutes": self.activity_minutes,
            "local_travel_minutes": self.local_travel_minutes,
            "travel_type": self.travel_type.value,
        }


@dataclass(frozen=True)
class DayPlan:
    """One calendar day of the itinerary."""
    day_number: int
    date: date
    day_type: DayType
    title: str = ""
    description: str = ""
    overnight_stay: Optional[OvernightStay] = None
    start_location: Optional[Place] = None
    route: Optional[Route] = None
    pois: tuple[POI, ...] = ()
    estimated_duration_minutes: int = 0
    timing: TimingBreakdown = field(default_factory=TimingBreakdown)

    def to_dict(self) -> dict:
        return {
            "day_number": self.day_number,
            "date": self.date.isoformat(),
            "day_type": self.day_type.value,
            "title": self.title,
            "description": self.description,
            "overnight_stay": _place_dict(self.overnight_stay),
            "start_location": _place_dict(self.start_location),
            "route": self.route.to_dict() if self.route else None,
            "pois": [p.to_dict() for p in self.pois],
            "estimated_duration_minutes": self.estimated_duration_minutes,
            "timing": self.timing.to_dict(),
        }


def itinerary_to_dicts(days: list[DayPlan]) -> list[dict]:
    """JSON-ready rendering of a full itinerary, one dict per day."""
    return [d.to_dict() for d in days]


def itinerary_summary(days: list[DayPlan]) -> dict:
    """Headline numbers shown above the daily schedule."""
    return {
        "days": len(days),
        "pois": sum(len(d.pois) for d in days),
        "total_minutes": sum(d.estimated_duration_minutes for d in days),
    }
