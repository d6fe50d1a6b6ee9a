"""
modules/planning/cluster_packer.py
-----------------------------------
Geographic clustering + greedy bin-packing of unpinned POI groups into the
available day slots.

Algorithm:
  1. Clustering — single-link over each group's main-POI coordinates using
     Haversine distance: two groups share a cluster when a chain of groups
     each within cluster_radius_km connects them. Groups without
     coordinates are singleton clusters.
  2. Size classification — a group or cluster of at least
     full_day_threshold_hours is "full-day" and gets an empty day of its own
     before anything else is placed. A cluster that cannot fit in one day at
     all is cut into day-sized chunks (input order kept) first.
  3. Packing — units are taken largest first (stable sort, ties by input
     order). Each goes to the first slot whose remaining capacity holds it;
     failing that, to the slot with the most remaining capacity, even if this
     overflows the day. Nothing is ever dropped.

Slots arrive pre-seeded with the pinned groups that already occupy them, so
their remaining capacity is correct from the start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import config
from modules.planning.poi_grouper import POIGroup
from modules.tool_usage.distance_tool import distance_km

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


# ── Slot / unit containers ────────────────────────────────────────────────────

@dataclass
class DaySlot:
    """One calendar day that accepts POIs; mutated only while packing."""
    day_index: int                                   # 0-based calendar day
    capacity_hours: float = 8.0
    groups: list[POIGroup] = field(default_factory=list)

    @property
    def load_hours(self) -> float:
        return sum(g.total_hours for g in self.groups)

    @property
    def remaining_hours(self) -> float:
        return self.capacity_hours - self.load_hours


@dataclass(frozen=True)
class PackUnit:
    """A cluster (or a day-sized chunk of one) placed as a whole."""
    groups: tuple[POIGroup, ...]

    @property
    def hours(self) -> float:
        return sum(g.total_hours for g in self.groups)


# ── Helpers ───────────────────────────────────────────────────────────────────

def clamp_pinned_day(pinned_day: int, total_days: int) -> int:
    """Pull an out-of-range 1-based pin back to the nearest valid day."""
    clamped = min(max(int(pinned_day), 1), total_days)
    if clamped != pinned_day:
        logger.warning("Pinned day %s outside 1..%d; clamped to %d", pinned_day, total_days, clamped)
    return clamped


def cluster_groups(groups: list[POIGroup], radius_km: float) -> list[list[POIGroup]]:
    """Single-link clusters; clusters and their members keep input order."""
    n = len(groups)
    cluster_of = [-1] * n
    clusters: list[list[int]] = []

    for seed in range(n):
        if cluster_of[seed] != -1:
            continue
        cid = len(clusters)
        cluster_of[seed] = cid
        members = [seed]
        frontier = [seed]
        while frontier:
            current = frontier.pop()
            here = groups[current].coordinates
            if here is None:
                continue
            for other in range(n):
                if cluster_of[other] != -1:
                    continue
                if distance_km(here, groups[other].coordinates) <= radius_km:
                    cluster_of[other] = cid
                    members.append(other)
                    frontier.append(other)
        clusters.append(sorted(members))

    return [[groups[i] for i in members] for members in clusters]


def split_oversized(cluster: list[POIGroup], capacity_hours: float) -> list[PackUnit]:
    """Cut a cluster into consecutive chunks that each fit in one day."""
    total = sum(g.total_hours for g in cluster)
    if total <= capacity_hours + _EPSILON:
        return [PackUnit(tuple(cluster))]

    chunks: list[PackUnit] = []
    current: list[POIGroup] = []
    current_hours = 0.0
    for group in cluster:
        if current and current_hours + group.total_hours > capacity_hours + _EPSILON:
            chunks.append(PackUnit(tuple(current)))
            current, current_hours = [], 0.0
        current.append(group)
        current_hours += group.total_hours
    if current:
        chunks.append(PackUnit(tuple(current)))
    return chunks


# ── Packer ────────────────────────────────────────────────────────────────────

class ClusterPacker:
    """Clusters unpinned groups and packs them into day slots."""

    def __init__(
        self,
        hours_per_day: float | None = None,
        cluster_radius_km: float | None = None,
        full_day_threshold_hours: float | None = None,
    ) -> None:
        self.hours_per_day = config.HOURS_PER_DAY if hours_per_day is None else hours_per_day
        self.cluster_radius_km = (
            config.CLUSTER_RADIUS_KM if cluster_radius_km is None else cluster_radius_km
        )
        self.full_day_threshold_hours = (
            config.FULL_DAY_THRESHOLD_HOURS
            if full_day_threshold_hours is None else full_day_threshold_hours
        )

    def new_slot(self, day_index: int, pinned: list[POIGroup] | None = None) -> DaySlot:
        return DaySlot(day_index=day_index, capacity_hours=self.hours_per_day, groups=list(pinned or []))

    def build_units(self, groups: list[POIGroup]) -> list[PackUnit]:
        """Full-day groups stand alone; the rest are clustered and cut to size."""
        big = [g for g in groups if g.total_hours >= self.full_day_threshold_hours - _EPSILON]
        rest = [g for g in groups if g.total_hours < self.full_day_threshold_hours - _EPSILON]

        # Keep input order across both kinds so ties stay stable.
        order = {id(g): i for i, g in enumerate(groups)}
        units = [PackUnit((g,)) for g in big]
        for cluster in cluster_groups(rest, self.cluster_radius_km):
            units.extend(split_oversized(cluster, self.hours_per_day))
        units.sort(key=lambda u: order[id(u.groups[0])])
        return units

    def pack_groups(self, groups: list[POIGroup], slots: list[DaySlot]) -> list[list[POIGroup]]:
        """
        Place every group into one of *slots* and return the groups per slot
        (same order as *slots*). Slots are copied, not mutated.
        """
        slots = [DaySlot(s.day_index, s.capacity_hours, list(s.groups)) for s in slots]
        if not groups:
            return [list(s.groups) for s in slots]
        if not slots:
            raise ValueError("no day slots available to pack POI groups into")

        units = self.build_units(groups)
        full_day = [u for u in units if u.hours >= self.full_day_threshold_hours - _EPSILON]
        partial = [u for u in units if u.hours < self.full_day_threshold_hours - _EPSILON]
        full_day.sort(key=lambda u: u.hours, reverse=True)
        partial.sort(key=lambda u: u.hours, reverse=True)

        logger.debug(
            "Packing %d group(s) as %d full-day and %d partial unit(s) into %d slot(s)",
            len(groups), len(full_day), len(partial), len(slots),
        )

        for unit in full_day:
            empty = next((s for s in slots if not s.groups), None)
            if empty is not None:
                empty.groups.extend(unit.groups)
            else:
                self._place(unit, slots)
        for unit in partial:
            self._place(unit, slots)

        return [list(s.groups) for s in slots]

    # ── internals ─────────────────────────────────────────────────────────

    def _place(self, unit: PackUnit, slots: list[DaySlot]) -> DaySlot:
        for slot in slots:
            if slot.remaining_hours + _EPSILON >= unit.hours:
                slot.groups.extend(unit.groups)
                return slot

        # max() keeps the earliest slot on ties.
        target = max(slots, key=lambda s: s.remaining_hours)
        target.groups.extend(unit.groups)
        logger.warning(
            "Day %d overflows: %.1fh scheduled against a %.1fh budget (%s)",
            target.day_index + 1, target.load_hours, target.capacity_hours,
            ", ".join(g.main.name for g in unit.groups),
        )
        return target
