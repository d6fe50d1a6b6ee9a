"""
schemas/requests.py
-------------------
Pydantic request models for the HTTP API and the CLI.

Field names are snake_case; the camelCase names stored by the browser app
(startDate, homeLocation, relatedMainName, pinnedDay, ...) are accepted as
aliases, and a place's label may also arrive as "location".

Range checks (coordinates, date order, required stays) are left to
modules.validation so every failure comes back as one readable message.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, Field

from modules.planning.day_budget import parse_trip_window
from schemas.itinerary import (
    Coordinates,
    DurationClass,
    Location,
    OvernightStay,
    POI,
    POIKind,
    TripRequest,
)


class CoordinatesIn(BaseModel):
    latitude: float
    longitude: float

    def to_coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class LocationIn(BaseModel):
    label: str = Field("", validation_alias=AliasChoices("label", "location"))
    coordinates: Optional[CoordinatesIn] = None

    def to_location(self) -> Location:
        return Location(
            label=self.label.strip(),
            coordinates=self.coordinates.to_coordinates() if self.coordinates else None,
        )


class OvernightStayIn(LocationIn):
    id: Optional[Union[str, int]] = None

    def to_stay(self, position: int) -> OvernightStay:
        return OvernightStay(
            id=str(self.id) if self.id is not None else f"stay-{position + 1}",
            label=self.label.strip(),
            coordinates=self.coordinates.to_coordinates() if self.coordinates else None,
        )


class POIIn(BaseModel):
    id: Optional[Union[str, int]] = None
    name: str = ""
    category: str = "General"
    duration_class: Optional[str] = Field(
        None, validation_alias=AliasChoices("duration_class", "durationClass", "duration"),
    )
    coordinates: Optional[CoordinatesIn] = None
    kind: Optional[str] = Field(None, validation_alias=AliasChoices("kind", "type"))
    related_main_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("related_main_name", "relatedMainName"),
    )
    pinned_day: Optional[int] = Field(
        None, validation_alias=AliasChoices("pinned_day", "pinnedDay"),
    )

    def to_poi(self, position: int) -> POI:
        return POI(
            id=str(self.id) if self.id is not None else f"poi-{position + 1}",
            name=self.name.strip(),
            category=self.category.strip() or "General",
            duration_class=DurationClass.parse(self.duration_class),
            coordinates=self.coordinates.to_coordinates() if self.coordinates else None,
            kind=POIKind.parse(self.kind),
            related_main_name=(
                self.related_main_name.strip() if self.related_main_name is not None else None
            ),
            pinned_day=self.pinned_day,
        )


class GenerateRequest(BaseModel):
    start_date: Optional[str] = Field(
        None, description="ISO-8601 date YYYY-MM-DD",
        validation_alias=AliasChoices("start_date", "startDate"),
    )
    end_date: Optional[str] = Field(
        None, description="ISO-8601 date YYYY-MM-DD",
        validation_alias=AliasChoices("end_date", "endDate"),
    )
    home_location: LocationIn = Field(
        default_factory=LocationIn,
        validation_alias=AliasChoices("home_location", "homeLocation"),
    )
    overnight_stays: list[OvernightStayIn] = Field(
        default_factory=list,
        validation_alias=AliasChoices("overnight_stays", "overnightStays"),
    )
    pois: list[POIIn] = Field(default_factory=list)
    session_id: str = Field("default", validation_alias=AliasChoices("session_id", "sessionId"))

    def to_trip(self) -> TripRequest:
        """Build the scheduler input; raises InvalidTripWindow on bad dates."""
        window = parse_trip_window(self.start_date or "", self.end_date or "")
        return TripRequest(
            start_date=window.start_date,
            end_date=window.end_date,
            home_location=self.home_location.to_location(),
            overnight_stays=tuple(s.to_stay(i) for i, s in enumerate(self.overnight_stays)),
            pois=tuple(p.to_poi(i) for i, p in enumerate(self.pois)),
        )
