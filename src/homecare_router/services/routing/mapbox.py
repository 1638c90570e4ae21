"""HTTP client for the Mapbox Optimized Trips API."""

from __future__ import annotations

import logging
from typing import Any

from ...config import settings
from ...errors import RoutingError
from ...models.domain import Coordinate
from ..units import meters_to_km, seconds_to_minutes
from .base import RoutingBackend
from .models import RouteRequest, RouteResult

logger = logging.getLogger(__name__)


def order_from_waypoints(waypoints: list[dict]) -> tuple[int, ...]:
    """Return the visiting order encoded by the response waypoints.

    The ``waypoint_index`` of the k-th returned waypoint is the request index
    visited at step k, so indices ``[2, 0, 1]`` visit stops C, A, B.
    """
    try:
        order = tuple(int(waypoint["waypoint_index"]) for waypoint in waypoints)
    except (KeyError, TypeError, ValueError) as e:
        raise RoutingError(MapboxOptimizedTripsClient.service_name, f"Malformed waypoint in response: {e}") from e
    if sorted(order) != list(range(len(order))):
        raise RoutingError(MapboxOptimizedTripsClient.service_name, f"Invalid waypoint order {list(order)}.")
    return order


class MapboxOptimizedTripsClient(RoutingBackend):
    service_name = "Mapbox Optimized Trips"
    mode = "optimized-trip"

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        profile: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url or settings.mapbox_base_url, **kwargs)
        self.access_token = access_token or settings.mapbox_access_token
        if not self.access_token:
            raise ValueError("Mapbox access token is not configured.")
        self.profile = profile or settings.mapbox_profile

    def _request_route(self, request: RouteRequest) -> RouteResult:
        coordinate_str = ";".join(f"{c.longitude},{c.latitude}" for c in request.coordinates)
        url = f"{self.base_url}/optimized-trips/v1/{self.profile}/{coordinate_str}"
        params = {
            "access_token": self.access_token,
            "geometries": "geojson",
            "overview": "full",
        }
        if request.has_starting_point:
            params["source"] = "first"

        logger.debug(f"Requesting Mapbox optimized trip for {len(request.coordinates)} waypoints")
        response = self._send("GET", url, params=params)
        if response.is_error:
            try:
                data = response.json()
            except ValueError:
                data = {}
        else:
            data = self._json(response)
        if not isinstance(data, dict):
            if not response.is_error:
                raise RoutingError(self.service_name, "Unexpected response body.")
            data = {}

        if response.is_error or data.get("code") != "Ok":
            message = data.get("message") or data.get("code") or f"HTTP {response.status_code}"
            logger.warning(f"Mapbox rejected optimization request: {message}")
            raise RoutingError(self.service_name, message)

        waypoints = data.get("waypoints") or []
        trips = data.get("trips") or []
        if not isinstance(waypoints, list) or not isinstance(trips, list):
            raise RoutingError(self.service_name, "Unexpected response body.")
        if len(waypoints) != len(request.coordinates) or not trips:
            raise RoutingError(self.service_name, "Response did not include a trip for every waypoint.")
        if not all(isinstance(waypoint, dict) for waypoint in waypoints) or not isinstance(trips[0], dict):
            raise RoutingError(self.service_name, "Unexpected response body.")

        order = order_from_waypoints(waypoints)
        # Snapped locations, re-indexed so stop_coordinates lines up with the request
        snapped: list[Coordinate] = list(request.coordinates)
        for waypoint, request_index in zip(waypoints, order):
            location = waypoint.get("location")
            if location:
                snapped[request_index] = Coordinate(longitude=float(location[0]), latitude=float(location[1]))

        trip = trips[0]
        geometry = tuple(
            Coordinate(longitude=float(point[0]), latitude=float(point[1]))
            for point in trip.get("geometry", {}).get("coordinates", [])
        )
        return RouteResult(
            stop_order=order,
            stop_coordinates=tuple(snapped),
            geometry=geometry or tuple(snapped[index] for index in order),
            distance_km=meters_to_km(trip.get("distance", 0.0)),
            duration_min=seconds_to_minutes(trip.get("duration", 0.0)),
            metadata={"service": self.service_name, "mode": self.mode},
        )
