"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from ...models.domain import Coordinate

RouteMode = Literal["matrix", "directions", "optimized-trip"]


@dataclass(frozen=True, slots=True)
class RouteRequest:
    coordinates: tuple[Coordinate, ...]
    mode: RouteMode
    profile: str
    has_starting_point: bool = False
    units: str = "km"
    metrics: tuple[str, ...] = ("distance", "duration")


@dataclass(frozen=True, slots=True)
class RouteResult:
    """Normalized routing response.

    ``stop_order`` holds indices into the request coordinates in visiting
    order. ``stop_coordinates`` is indexed like the request coordinates.
    """

    stop_order: tuple[int, ...]
    stop_coordinates: tuple[Coordinate, ...]
    geometry: tuple[Coordinate, ...]
    distance_km: float
    duration_min: float
    metadata: dict = field(default_factory=dict)


def trivial_route(request: RouteRequest) -> RouteResult:
    """Route for a single stop; no service can route one coordinate."""
    return RouteResult(
        stop_order=tuple(range(len(request.coordinates))),
        stop_coordinates=request.coordinates,
        geometry=request.coordinates,
        distance_km=0.0,
        duration_min=0.0,
    )
