"""
modules/planning/day_order.py
------------------------------
Orders one day's POIs to cut down on backtracking.

Nearest-neighbour over groups, not individual POIs: the groups are re-derived
from the day's flat list, the tour starts at the first group in input order,
and each step appends the whole group (main POI, then its secondaries in
their original order) whose main POI is closest to the current one.

Groups without coordinates are infinitely far from everything, so they
drift to the end in their original relative order. No randomness and no
unstable sorts: identical input always yields identical output.

optimize_day_order() regroups a flat list by name, so when two main POIs in
that list share a name the earlier one takes every secondary. The scheduler
hands its trip-wide groups to order_groups() and is not affected.
"""

from __future__ import annotations

import math
from typing import Iterable

from modules.planning.poi_grouper import POIGroup, build_groups
from modules.tool_usage.distance_tool import distance_km
from schemas.itinerary import POI


def _next_group(current: POIGroup, remaining: list[POIGroup]) -> int:
    """Index into *remaining* of the nearest group; earliest wins on ties."""
    best_idx = 0
    best_key = (math.inf, True)
    for idx, candidate in enumerate(remaining):
        key = (
            distance_km(current.coordinates, candidate.coordinates),
            candidate.coordinates is None,
        )
        if idx == 0 or key < best_key:
            best_idx, best_key = idx, key
    return best_idx


def order_groups(groups: list[POIGroup]) -> list[POIGroup]:
    if len(groups) <= 1:
        return list(groups)
    remaining = list(groups)
    ordered = [remaining.pop(0)]
    while remaining:
        ordered.append(remaining.pop(_next_group(ordered[-1], remaining)))
    return ordered


def optimize_day_order(pois: Iterable[POI]) -> list[POI]:
    """Return the day's POIs reordered, each secondary right after its main."""
    return [p for g in order_groups(build_groups(pois)) for p in g.members]
