"""
conftest.py
-----------
Shared pytest fixtures for the backend test modules.

The JSONL event log is switched off before config.py is imported so test
runs never write into backend/logs/.
"""

from __future__ import annotations

import os
from datetime import date

os.environ.setdefault("STRUCTURED_LOGGING", "false")

import pytest  # noqa: E402

from modules.observability.logger import StructuredLogger  # noqa: E402
from modules.planning import ClusterPacker, DayBudgetCalculator, ItineraryScheduler  # noqa: E402
from schemas.itinerary import (  # noqa: E402
    Coordinates,
    DurationClass,
    Location,
    OvernightStay,
    POI,
    POIKind,
    TripRequest,
)

PARIS = Coordinates(48.8566, 2.3522)
HOTEL_A = Coordinates(48.8584, 2.2945)


def poi(
    name: str,
    duration: str = "half-day",
    coords: tuple[float, float] | None = None,
    *,
    secondary_of: str | None = None,
    pinned_day: int | None = None,
    poi_id: str | None = None,
) -> POI:
    return POI(
        id=poi_id or name.lower().replace(" ", "-"),
        name=name,
        duration_class=DurationClass.parse(duration),
        coordinates=Coordinates(*coords) if coords else None,
        kind=POIKind.SECONDARY if secondary_of is not None else POIKind.MAIN,
        related_main_name=secondary_of,
        pinned_day=pinned_day,
    )


def trip(
    start: str,
    end: str,
    pois: list[POI] | tuple[POI, ...] = (),
    stays: list[OvernightStay] | None = None,
    home: Location | None = None,
) -> TripRequest:
    return TripRequest(
        start_date=date.fromisoformat(start),
        end_date=date.fromisoformat(end),
        home_location=home or Location("Home", PARIS),
        overnight_stays=tuple(stays or [OvernightStay("stay-a", "Hotel A", HOTEL_A)]),
        pois=tuple(pois),
    )


@pytest.fixture
def make_poi():
    return poi


@pytest.fixture
def make_trip():
    return trip


@pytest.fixture
def quiet_events() -> StructuredLogger:
    return StructuredLogger(enabled=False)


@pytest.fixture
def scheduler(quiet_events) -> ItineraryScheduler:
    """Scheduler pinned to the stock tunables regardless of the environment."""
    return ItineraryScheduler(
        day_budget=DayBudgetCalculator(
            max_travel_minutes=240, default_travel_minutes=180, travel_estimate_mode="flat",
        ),
        packer=ClusterPacker(hours_per_day=8.0, cluster_radius_km=20.0, full_day_threshold_hours=6.0),
        local_travel_minutes=60,
        local_travel_mode="flat",
        events=quiet_events,
    )
