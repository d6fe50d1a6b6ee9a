"""
modules/planning/day_budget.py
-------------------------------
Day-budget calculator: how many calendar days have spare capacity for POIs.

  tour_days = (total_days - 2) + first_day_feasible + last_day_feasible,
  floored at 0.

The first and last day carry forced home <-> stay travel. They only count as
tour days when that travel fits under MAX_TRAVEL_MINUTES_FOR_ACTIVITIES.

A 1-day trip has a single day that is both first and last; the formula above
yields one slot only when both ends are feasible, so nothing is double counted.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

import config
from modules.planning.errors import InvalidTripWindow
from modules.tool_usage.distance_tool import DistanceTool
from schemas.itinerary import Place, TripWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayBudget:
    total_days: int
    first_day_feasible: bool
    last_day_feasible: bool
    first_day_travel_minutes: int
    last_day_travel_minutes: int

    @property
    def tour_days(self) -> int:
        return count_tour_days(self.total_days, self.first_day_feasible, self.last_day_feasible)

    @property
    def slot_days(self) -> list[int]:
        """0-based calendar-day indices that accept scheduled POIs."""
        return tour_slot_indices(self.total_days, self.first_day_feasible, self.last_day_feasible)

    @property
    def preferred_slot_days(self) -> list[int]:
        """slot_days in packing order: full tour days, then day 1, then the last day."""
        edges = {0, self.total_days - 1}
        slots = self.slot_days
        return [i for i in slots if i not in edges] + [i for i in slots if i in edges]


# ── Window helpers ────────────────────────────────────────────────────────────

def _as_date(value: Union[date, str], field_name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise InvalidTripWindow(f"{field_name}={value!r} is not an ISO date") from exc


def parse_trip_window(start: Union[date, str], end: Union[date, str]) -> TripWindow:
    """Build a TripWindow from dates or ISO strings, rejecting inverted ranges."""
    window = TripWindow(_as_date(start, "start_date"), _as_date(end, "end_date"))
    validate_total_days(window.total_days)
    return window


def validate_total_days(total_days: Union[int, float]) -> int:
    """Return total_days as an int, or raise InvalidTripWindow."""
    if isinstance(total_days, bool) or not isinstance(total_days, (int, float)):
        raise InvalidTripWindow(f"day count {total_days!r} is not a number")
    if isinstance(total_days, float):
        if not math.isfinite(total_days) or not total_days.is_integer():
            raise InvalidTripWindow(f"day count {total_days!r} is not a finite whole number")
        total_days = int(total_days)
    if total_days < 1:
        raise InvalidTripWindow(
            f"trip spans {total_days} day(s); end_date must not be before start_date"
        )
    return total_days


def count_tour_days(total_days: int, first_day_feasible: bool, last_day_feasible: bool) -> int:
    total_days = validate_total_days(total_days)
    tour_days = (total_days - 2) + int(first_day_feasible) + int(last_day_feasible)
    return max(0, tour_days)


def tour_slot_indices(total_days: int, first_day_feasible: bool, last_day_feasible: bool) -> list[int]:
    total_days = validate_total_days(total_days)
    if total_days == 1:
        return [0] if first_day_feasible and last_day_feasible else []
    slots = list(range(1, total_days - 1))
    if first_day_feasible:
        slots.insert(0, 0)
    if last_day_feasible:
        slots.append(total_days - 1)
    return slots


def is_travel_feasible(travel_minutes: float, ceiling_minutes: float) -> bool:
    return travel_minutes <= ceiling_minutes


# ── Calculator ────────────────────────────────────────────────────────────────

class DayBudgetCalculator:
    """
    Estimates forced travel for the first and last day and turns it into a
    DayBudget.

    travel_estimate_mode:
      "flat"     → always default_travel_minutes
      "distance" → Haversine × driving route factor at driving speed when both
                   endpoints are geocoded, otherwise the flat value
    """

    def __init__(
        self,
        max_travel_minutes: int | None = None,
        default_travel_minutes: int | None = None,
        travel_estimate_mode: str | None = None,
        distance_tool: DistanceTool | None = None,
    ) -> None:
        self.max_travel_minutes = (
            config.MAX_TRAVEL_MINUTES_FOR_ACTIVITIES if max_travel_minutes is None else max_travel_minutes
        )
        self.default_travel_minutes = (
            config.DEFAULT_TRAVEL_MINUTES if default_travel_minutes is None else default_travel_minutes
        )
        self.travel_estimate_mode = travel_estimate_mode or config.TRAVEL_ESTIMATE_MODE
        self.distance_tool = distance_tool or DistanceTool()

    def estimate_travel_minutes(self, origin: Optional[Place], destination: Optional[Place]) -> int:
        if self.travel_estimate_mode != "distance" or origin is None or destination is None:
            return self.default_travel_minutes
        minutes = self.distance_tool.driving_minutes(origin.coordinates, destination.coordinates)
        if minutes is None:
            logger.info(
                "No coordinates for %r -> %r; using flat %d min travel estimate",
                origin.label, destination.label, self.default_travel_minutes,
            )
            return self.default_travel_minutes
        return int(round(minutes))

    def calculate(
        self,
        window: TripWindow,
        home: Optional[Place] = None,
        first_stay: Optional[Place] = None,
        last_stay: Optional[Place] = None,
    ) -> DayBudget:
        total_days = validate_total_days(window.total_days)
        first_minutes = self.estimate_travel_minutes(home, first_stay)
        last_minutes = self.estimate_travel_minutes(last_stay, home)
        budget = DayBudget(
            total_days=total_days,
            first_day_feasible=is_travel_feasible(first_minutes, self.max_travel_minutes),
            last_day_feasible=is_travel_feasible(last_minutes, self.max_travel_minutes),
            first_day_travel_minutes=first_minutes,
            last_day_travel_minutes=last_minutes,
        )
        logger.debug(
            "Day budget: %d day(s), %d tour day(s), first feasible=%s, last feasible=%s",
            total_days, budget.tour_days, budget.first_day_feasible, budget.last_day_feasible,
        )
        return budget
