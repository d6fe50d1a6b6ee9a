"""
modules/planning/poi_grouper.py
--------------------------------
Hierarchical grouping of POIs: one main POI plus the secondary POIs that
name it through related_main_name.

Rules:
  - Matching is by exact, case-sensitive name. If two main POIs share a
    name, the first one in input order receives the secondaries and the
    later one keeps none.
  - A secondary whose main cannot be found becomes an orphan group of one.
  - A group is pinned when its main POI carries pinned_day; secondaries
    always follow their main, whatever their own pinned_day says.
  - Groups come out in input order of their representative POI so that
    every later tie-break is stable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from schemas.itinerary import POI, Coordinates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class POIGroup:
    main: POI
    secondaries: tuple[POI, ...] = ()

    @property
    def members(self) -> tuple[POI, ...]:
        return (self.main,) + self.secondaries

    @property
    def total_hours(self) -> float:
        return sum(p.hours for p in self.members)

    @property
    def pinned_day(self) -> Optional[int]:
        return self.main.pinned_day

    @property
    def coordinates(self) -> Optional[Coordinates]:
        return self.main.coordinates


@dataclass(frozen=True)
class GroupedPOIs:
    pinned_groups: dict[int, list[POIGroup]] = field(default_factory=dict)
    unpinned_groups: list[POIGroup] = field(default_factory=list)


def build_groups(pois: Iterable[POI]) -> list[POIGroup]:
    """Re-derive main/secondary groups from a flat POI list."""
    pois = list(pois)

    owner: dict[str, str] = {}            # main name -> id of the first main with it
    for poi in pois:
        if not poi.is_secondary:
            owner.setdefault(poi.name, poi.id)

    attached: dict[str, list[POI]] = {}   # main id -> secondaries in input order
    orphans: set[int] = set()             # positions of orphaned secondaries
    for pos, poi in enumerate(pois):
        if not poi.is_secondary:
            continue
        main_id = owner.get(poi.related_main_name) if poi.related_main_name is not None else None
        if main_id is None:
            logger.info(
                "Secondary POI %r references unknown main %r; scheduling it on its own",
                poi.name, poi.related_main_name,
            )
            orphans.add(pos)
        else:
            attached.setdefault(main_id, []).append(poi)

    groups: list[POIGroup] = []
    for pos, poi in enumerate(pois):
        if poi.is_secondary:
            if pos in orphans:
                groups.append(POIGroup(main=poi))
            continue
        groups.append(POIGroup(main=poi, secondaries=tuple(attached.get(poi.id, ()))))
    return groups


def group_pois(pois: Iterable[POI]) -> GroupedPOIs:
    """Split the POI set into pinned groups (by 1-based day) and unpinned groups."""
    pinned: dict[int, list[POIGroup]] = {}
    unpinned: list[POIGroup] = []
    for group in build_groups(pois):
        if group.pinned_day is None:
            unpinned.append(group)
        else:
            pinned.setdefault(group.pinned_day, []).append(group)
    return GroupedPOIs(pinned_groups=pinned, unpinned_groups=unpinned)
