"""Assemble routing requests and provider payloads."""

from __future__ import annotations

from typing import Sequence

from ...errors import ValidationError
from ...models.domain import Coordinate
from .models import RouteMode, RouteRequest


def build_coordinate_list(
    coordinates: Sequence[Coordinate],
    starting_point: Coordinate | None = None,
) -> list[Coordinate]:
    """Return ``[start, *coordinates]`` when a starting point is configured."""
    if starting_point is not None:
        return [starting_point, *coordinates]
    return list(coordinates)


def build_request(
    coordinates: Sequence[Coordinate],
    *,
    mode: RouteMode,
    profile: str,
    starting_point: Coordinate | None = None,
) -> RouteRequest:
    """Build a fresh request. Input order is kept; optimized trips treat it as a hint."""
    ordered = build_coordinate_list(coordinates, starting_point)
    if not ordered:
        raise ValidationError("At least one coordinate is required to request a route.")
    return RouteRequest(
        coordinates=tuple(ordered),
        mode=mode,
        profile=profile,
        has_starting_point=starting_point is not None,
    )


def payload_for(request: RouteRequest) -> dict:
    """Render the JSON body for the OpenRouteService variants."""
    locations = [coordinate.as_lon_lat() for coordinate in request.coordinates]
    match request.mode:
        case "matrix":
            return {
                "locations": locations,
                "metrics": list(request.metrics),
                "units": request.units,
            }
        case "directions":
            return {
                "coordinates": locations,
                "instructions": False,
            }
        case _:
            raise ValueError(f"No JSON payload for routing mode '{request.mode}'.")
