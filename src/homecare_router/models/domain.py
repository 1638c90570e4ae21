"""Domain models for form entries, coordinates and published itineraries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

STARTING_POINT_LABEL = "starting point"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A (longitude, latitude) pair as returned by geocoders and routing APIs."""

    longitude: float
    latitude: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.longitude) and math.isfinite(self.latitude)):
            raise ValueError(f"Coordinate values must be finite, got ({self.longitude}, {self.latitude}).")

    def as_lon_lat(self) -> list[float]:
        return [self.longitude, self.latitude]


@dataclass(frozen=True, slots=True)
class AddressEntry:
    """One row of the visit form."""

    address: str
    appointment_time: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ItineraryItem:
    position: int
    label: str
    address: str
    appointment_time: Optional[str]
    coordinate: Coordinate
    is_starting_point: bool = False

    @property
    def time_label(self) -> str:
        if self.is_starting_point:
            return STARTING_POINT_LABEL
        return self.appointment_time or ""


@dataclass(frozen=True, slots=True)
class RouteSummary:
    distance_km: float
    duration_min: float
    raw_duration_min: float
    traffic_multiplier: float
    stop_count: int


@dataclass(frozen=True, slots=True)
class PublishedItinerary:
    """Result of a successful run. Replaced as a whole, never edited."""

    items: tuple[ItineraryItem, ...]
    summary: RouteSummary
    geometry: tuple[Coordinate, ...] = field(default_factory=tuple)


class WorkflowState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    GEOCODING = "geocoding"
    REQUESTING_ROUTE = "requesting_route"
    RECONCILED = "reconciled"
    FAILED = "failed"
