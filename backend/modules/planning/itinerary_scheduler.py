"""
modules/planning/itinerary_scheduler.py
-----------------------------------------
Day-by-day itinerary generation.

Pipeline (one pass per generate() call, no state kept between calls):
  1. DayBudgetCalculator — tour days and which calendar days host POIs.
  2. group_pois          — main/secondary groups, pinned vs unpinned.
  3. ClusterPacker       — clusters unpinned groups and packs them into the
                           tour-day slots, pre-seeded with pinned groups.
                           Middle days are offered first, then day 1, then
                           the last day.
  4. order_groups        — nearest-neighbour order of each day's groups.
  5. Assembly            — day type, route, overnight stay, timing.

Day assembly:
  Day 1        → route home → stays[0]; only receives packed POIs when the
                 drive fits under MAX_TRAVEL_MINUTES_FOR_ACTIVITIES.
  Last day     → same rule for stays[(total_days - 2) % n] → home.
  Middle days  → "tour", overnight stay stays[(i - 1) % n].
  1-day trips  → one round trip home → home; feasible only if both legs are.

A first or last day is "mixed" when it ends up carrying POIs and "travel"
otherwise. Pinned POIs always land on their day, even a day whose drive is
too long for packed POIs.

Estimated duration = forced travel + activity minutes + local travel, where
local travel is either the flat allowance on tour days (LOCAL_TRAVEL_MODE
"flat") or the sum of estimated walking legs stay → POIs → stay ("walking").
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

import config
from modules.observability.logger import ITINERARY_GENERATED, StructuredLogger
from modules.planning.cluster_packer import ClusterPacker, clamp_pinned_day
from modules.planning.day_budget import DayBudget, DayBudgetCalculator, validate_total_days
from modules.planning.day_order import order_groups
from modules.planning.errors import NoOvernightStays
from modules.planning.poi_grouper import POIGroup, group_pois
from modules.tool_usage.distance_tool import DistanceTool
from schemas.itinerary import (
    DayPlan,
    DayType,
    OvernightStay,
    Place,
    POI,
    Route,
    TimingBreakdown,
    TravelType,
    TripRequest,
)

logger = logging.getLogger(__name__)

_events = StructuredLogger()


class ItineraryScheduler:
    """
    Turns a TripRequest into a list of DayPlans.

    All tunables default to config.py and can be overridden per instance,
    which is how the tests pin them down.
    """

    def __init__(
        self,
        day_budget: DayBudgetCalculator | None = None,
        packer: ClusterPacker | None = None,
        distance_tool: DistanceTool | None = None,
        local_travel_minutes: int | None = None,
        local_travel_mode: str | None = None,
        events: StructuredLogger | None = None,
    ) -> None:
        self.distance_tool = distance_tool or DistanceTool()
        self.day_budget = day_budget or DayBudgetCalculator(distance_tool=self.distance_tool)
        self.packer = packer or ClusterPacker()
        self.local_travel_minutes = (
            config.LOCAL_TRAVEL_MINUTES if local_travel_minutes is None else local_travel_minutes
        )
        self.local_travel_mode = local_travel_mode or config.LOCAL_TRAVEL_MODE
        self.events = events or _events

    # ── Public entry point ────────────────────────────────────────────────────

    def generate(self, trip: TripRequest, session_id: str = "default") -> list[DayPlan]:
        """
        Generate the complete itinerary.

        Raises:
            InvalidTripWindow: end before start or a non-finite day count.
            NoOvernightStays:  no stay to anchor the trip on.
        """
        with self.events.timed(session_id, "ItineraryScheduler.generate"):
            total_days = validate_total_days(trip.window.total_days)
            stays = list(trip.overnight_stays)
            if not stays:
                raise NoOvernightStays("at least one overnight stay is required")

            budget = self.day_budget.calculate(
                trip.window,
                home=trip.home_location,
                first_stay=stays[0],
                last_stay=self._last_stay(stays, total_days),
            )
            allocation = self._allocate(trip.pois, budget)
            days = [
                self._assemble_day(i, trip, stays, budget, self._ordered_pois(allocation.get(i, [])))
                for i in range(total_days)
            ]

        self.events.log(session_id, ITINERARY_GENERATED, {
            "days": total_days,
            "tour_days": budget.tour_days,
            "pois": len(trip.pois),
            "scheduled": sum(len(d.pois) for d in days),
        })
        logger.info(
            "Generated %d-day itinerary: %d POI(s) over %d tour day(s)",
            total_days, len(trip.pois), budget.tour_days,
        )
        return days

    # ── Allocation ────────────────────────────────────────────────────────────

    def _allocate(self, pois: tuple[POI, ...], budget: DayBudget) -> dict[int, list[POIGroup]]:
        """Map 0-based calendar day → unordered POI groups for that day."""
        total_days = budget.total_days
        grouped = group_pois(pois)

        pinned: dict[int, list[POIGroup]] = {}
        for day, groups in sorted(grouped.pinned_groups.items()):
            index = clamp_pinned_day(day, total_days) - 1
            pinned.setdefault(index, []).extend(groups)

        slot_days = budget.preferred_slot_days
        if grouped.unpinned_groups and not slot_days:
            logger.warning(
                "No day has room for activities; spreading %d group(s) over all %d day(s)",
                len(grouped.unpinned_groups), total_days,
            )
            slot_days = list(range(total_days))

        slots = [self.packer.new_slot(i, pinned.get(i)) for i in slot_days]
        packed = self.packer.pack_groups(grouped.unpinned_groups, slots)

        allocation: dict[int, list[POIGroup]] = dict(pinned)
        for index, day_groups in zip(slot_days, packed):
            allocation[index] = day_groups
        return allocation

    @staticmethod
    def _ordered_pois(groups: list[POIGroup]) -> list[POI]:
        # Trip-wide groups; a secondary keeps the main it was grouped with.
        return [p for g in order_groups(groups) for p in g.members]

    # ── Assembly ──────────────────────────────────────────────────────────────

    @staticmethod
    def _last_stay(stays: list[OvernightStay], total_days: int) -> OvernightStay:
        return stays[max(total_days - 2, 0) % len(stays)]

    def _assemble_day(
        self,
        index: int,
        trip: TripRequest,
        stays: list[OvernightStay],
        budget: DayBudget,
        pois: list[POI],
    ) -> DayPlan:
        total_days = budget.total_days
        home = trip.home_location
        day_date = trip.start_date + timedelta(days=index)
        day_pois = tuple(pois)

        if total_days == 1:
            day_type = DayType.MIXED if day_pois else DayType.TRAVEL
            mixed = day_type is DayType.MIXED
            return self._build(
                index, day_date, day_type, day_pois,
                title="Day Trip" if mixed else "Travel Day - Round Trip",
                description=(
                    "Travel out, explore local attractions and return home" if mixed
                    else "Travel out and back home"
                ),
                overnight_stay=None,
                start_location=home,
                route=Route(home, home),
                travel_minutes=budget.first_day_travel_minutes + budget.last_day_travel_minutes,
                travel_type=TravelType.ROUND_TRIP,
            )

        if index == 0:
            day_type = DayType.MIXED if day_pois else DayType.TRAVEL
            mixed = day_type is DayType.MIXED
            return self._build(
                index, day_date, day_type, day_pois,
                title="Departure & First Activities" if mixed else "Travel Day - Departure",
                description=(
                    "Travel to destination and explore local attractions" if mixed
                    else "Travel from home to first destination"
                ),
                overnight_stay=stays[0],
                start_location=home,
                route=Route(home, stays[0]),
                travel_minutes=budget.first_day_travel_minutes,
                travel_type=TravelType.DEPARTURE,
            )

        if index == total_days - 1:
            last_stay = self._last_stay(stays, total_days)
            day_type = DayType.MIXED if day_pois else DayType.TRAVEL
            mixed = day_type is DayType.MIXED
            return self._build(
                index, day_date, day_type, day_pois,
                title="Final Activities & Return" if mixed else "Travel Day - Return",
                description=(
                    "Final sightseeing and travel back home" if mixed else "Travel back home"
                ),
                overnight_stay=None,
                start_location=last_stay,
                route=Route(last_stay, home),
                travel_minutes=budget.last_day_travel_minutes,
                travel_type=TravelType.RETURN,
            )

        return self._build(
            index, day_date, DayType.TOUR, day_pois,
            title=f"Tour Day {index}",
            description="Explore local attractions",
            overnight_stay=stays[(index - 1) % len(stays)],
            start_location=None,
            route=None,
            travel_minutes=0,
            travel_type=TravelType.NONE,
        )

    def _build(
        self,
        index: int,
        day_date: date,
        day_type: DayType,
        pois: tuple[POI, ...],
        *,
        title: str,
        description: str,
        overnight_stay: Optional[OvernightStay],
        start_location: Optional[Place],
        route: Optional[Route],
        travel_minutes: int,
        travel_type: TravelType,
    ) -> DayPlan:
        activity = sum(p.minutes for p in pois)
        base = overnight_stay if overnight_stay is not None else start_location
        timing = TimingBreakdown(
            travel_minutes=travel_minutes,
            activity_minutes=activity,
            local_travel_minutes=self._local_travel(day_type, pois, base),
            travel_type=travel_type,
        )
        return DayPlan(
            day_number=index + 1,
            date=day_date,
            day_type=day_type,
            title=title,
            description=description,
            overnight_stay=overnight_stay,
            start_location=start_location,
            route=route,
            pois=pois,
            estimated_duration_minutes=timing.total_minutes,
            timing=timing,
        )

    # ── Local travel ──────────────────────────────────────────────────────────

    def _local_travel(self, day_type: DayType, pois: tuple[POI, ...], base: Optional[Place]) -> int:
        if not pois:
            return 0
        flat = self.local_travel_minutes if day_type is DayType.TOUR else 0
        if self.local_travel_mode != "walking" or day_type is DayType.TRAVEL:
            return flat

        walked = self.walking_leg_minutes(pois, base)
        return flat if walked is None else int(round(walked))

    def walking_leg_minutes(self, pois: tuple[POI, ...], base: Optional[Place]) -> Optional[float]:
        """
        Sum of estimated walking legs base → first POI → … → last POI → base.
        Legs with an unknown endpoint are skipped; None when none is measurable.
        """
        anchor = base.coordinates if base is not None else None
        points = [anchor] + [p.coordinates for p in pois] + [anchor]
        legs = [
            self.distance_tool.walking_minutes(a, b)
            for a, b in zip(points, points[1:])
        ]
        measured = [m for m in legs if m is not None]
        if not measured:
            return None
        return sum(measured)


def generate_itinerary(trip: TripRequest, session_id: str = "default") -> list[DayPlan]:
    """Module-level shortcut using the configured defaults."""
    return ItineraryScheduler().generate(trip, session_id=session_id)
