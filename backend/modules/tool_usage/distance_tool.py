"""
modules/tool_usage/distance_tool.py
-------------------------------------
Straight-line distance and travel-time estimates from coordinates.
No external HTTP calls are made; real routing belongs to the map layer.

Missing coordinates are a first-class state: distance_km() returns inf and
the *_minutes() helpers return None so callers can pick their own fallback.

Config knobs (config.py):
  WALKING_SPEED_KMH / DRIVING_SPEED_KMH        -- average speeds
  WALKING_ROUTE_FACTOR / DRIVING_ROUTE_FACTOR  -- straight line → route length
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import config
from schemas.itinerary import Coordinates

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_km(a: Optional[Coordinates], b: Optional[Coordinates]) -> float:
    """Haversine distance, or inf when either side is not geocoded."""
    if a is None or b is None:
        return math.inf
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def _km_to_minutes(km: float, speed_kmh: float) -> float:
    """Route km to minutes at a given speed."""
    return (km / speed_kmh) * 60.0


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------


class DistanceTool:
    """
    Estimates walking and driving times between coordinates by stretching the
    Haversine distance with a route factor and dividing by an average speed.
    """

    def __init__(
        self,
        walking_speed_kmh: float | None = None,
        driving_speed_kmh: float | None = None,
        walking_route_factor: float | None = None,
        driving_route_factor: float | None = None,
    ) -> None:
        self.walking_speed = walking_speed_kmh or config.WALKING_SPEED_KMH
        self.driving_speed = driving_speed_kmh or config.DRIVING_SPEED_KMH
        self.walking_factor = walking_route_factor or config.WALKING_ROUTE_FACTOR
        self.driving_factor = driving_route_factor or config.DRIVING_ROUTE_FACTOR

    def walking_minutes(
        self, a: Optional[Coordinates], b: Optional[Coordinates]
    ) -> Optional[float]:
        """Estimated walking time, or None if either endpoint lacks coordinates."""
        return self._minutes(a, b, self.walking_factor, self.walking_speed)

    def driving_minutes(
        self, a: Optional[Coordinates], b: Optional[Coordinates]
    ) -> Optional[float]:
        """Estimated driving time, or None if either endpoint lacks coordinates."""
        return self._minutes(a, b, self.driving_factor, self.driving_speed)

    # -------------------------------------------------------------------------
    # Private
    # -------------------------------------------------------------------------

    @staticmethod
    def _minutes(
        a: Optional[Coordinates],
        b: Optional[Coordinates],
        factor: float,
        speed_kmh: float,
    ) -> Optional[float]:
        km = distance_km(a, b)
        if math.isinf(km):
            return None
        if km == 0.0:
            return 0.0
        return _km_to_minutes(km * factor, speed_kmh)
