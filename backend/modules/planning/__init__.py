"""modules/planning — itinerary scheduling engine."""

from modules.planning.errors import (
    SchedulingError, InvalidTripWindow, NoOvernightStays, InvalidTripRequest,
)
from modules.planning.day_budget import (
    DayBudget, DayBudgetCalculator, count_tour_days, parse_trip_window,
)
from modules.planning.poi_grouper import POIGroup, GroupedPOIs, build_groups, group_pois
from modules.planning.cluster_packer import ClusterPacker, DaySlot, cluster_groups
from modules.planning.day_order import optimize_day_order
from modules.planning.itinerary_scheduler import ItineraryScheduler, generate_itinerary

__all__ = [
    "SchedulingError",
    "InvalidTripWindow",
    "NoOvernightStays",
    "InvalidTripRequest",
    "DayBudget",
    "DayBudgetCalculator",
    "count_tour_days",
    "parse_trip_window",
    "POIGroup",
    "GroupedPOIs",
    "build_groups",
    "group_pois",
    "ClusterPacker",
    "DaySlot",
    "cluster_groups",
    "optimize_day_order",
    "ItineraryScheduler",
    "generate_itinerary",
]
