"""
modules/tool_usage/geocoder.py
--------------------------------
Boundary between free-text place labels and coordinates.

The scheduler never geocodes anything itself. A host passes any object with
a ``resolve(label)`` method to resolve_trip() before scheduling; labels the
geocoder does not know keep ``coordinates=None``, which every stage treats as
"unknown distance".

GazetteerGeocoder is the offline implementation used by the CLI: a label →
(lat, lon) table matched case-insensitively, like a city-centre lookup.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Protocol, TypeVar

from schemas.itinerary import Coordinates, TripRequest

logger = logging.getLogger(__name__)

_P = TypeVar("_P")


class Geocoder(Protocol):
    def resolve(self, label: str) -> Optional[Coordinates]:
        ...


class GazetteerGeocoder:
    """Static label → coordinates table; zero network calls."""

    def __init__(self, places: dict[str, tuple[float, float]] | None = None) -> None:
        self._places = {
            self._key(label): Coordinates(float(lat), float(lon))
            for label, (lat, lon) in (places or {}).items()
        }

    @classmethod
    def from_file(cls, path: Path | str) -> "GazetteerGeocoder":
        """
        Load a JSON object of the form
        {"Hotel A": {"latitude": 48.85, "longitude": 2.29}, ...}
        or {"Hotel A": [48.85, 2.29], ...}.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        places: dict[str, tuple[float, float]] = {}
        for label, value in raw.items():
            if isinstance(value, dict):
                places[label] = (value["latitude"], value["longitude"])
            else:
                lat, lon = value
                places[label] = (lat, lon)
        return cls(places)

    def resolve(self, label: str) -> Optional[Coordinates]:
        return self._places.get(self._key(label))

    @staticmethod
    def _key(label: str) -> str:
        return " ".join(str(label).split()).lower()


def _resolved(place: _P, label: str, geocoder: Geocoder) -> _P:
    if getattr(place, "coordinates", None) is not None:
        return place
    coords = geocoder.resolve(label)
    if coords is None:
        logger.info("No coordinates for %r; distances to it are treated as unknown", label)
        return place
    return replace(place, coordinates=coords)


def resolve_trip(trip: TripRequest, geocoder: Geocoder) -> TripRequest:
    """Fill in missing coordinates; places that already carry them are untouched."""
    return replace(
        trip,
        home_location=_resolved(trip.home_location, trip.home_location.label, geocoder),
        overnight_stays=tuple(_resolved(s, s.label, geocoder) for s in trip.overnight_stays),
        pois=tuple(_resolved(p, p.name, geocoder) for p in trip.pois),
    )
