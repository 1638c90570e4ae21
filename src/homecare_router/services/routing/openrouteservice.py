"""HTTP client for the OpenRouteService matrix and directions endpoints."""

from __future__ import annotations

import logging
from typing import Any

from ...config import settings
from ...errors import RoutingError
from ...models.domain import Coordinate
from ..units import meters_to_km, round2, seconds_to_minutes
from .base import RoutingBackend
from .models import RouteRequest, RouteResult
from .request_builder import payload_for

logger = logging.getLogger(__name__)


def _error_message(data: Any) -> str | None:
    """Extract the message from ``{"error": "..."}`` or ``{"error": {"message": "..."}}``."""
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message") or (str(error["code"]) if "code" in error else None)
    if error:
        return str(error)
    return None


class OpenRouteServiceClient(RoutingBackend):
    service_name = "OpenRouteService"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        profile: str | None = None,
        mode: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url or settings.ors_base_url, **kwargs)
        self.api_key = api_key or settings.ors_api_key
        if not self.api_key:
            raise ValueError("OpenRouteService API key is not configured.")
        self.profile = profile or settings.ors_profile
        self.mode = mode or settings.routing_mode
        if self.mode not in ("matrix", "directions"):
            raise ValueError(f"Unsupported OpenRouteService mode '{self.mode}'.")

    def _post(self, url: str, payload: dict) -> dict:
        response = self._send(
            "POST",
            url,
            json=payload,
            headers={"Authorization": self.api_key, "Content-Type": "application/json"},
        )
        if response.is_error:
            try:
                message = _error_message(response.json())
            except ValueError:
                message = None
            message = message or f"HTTP {response.status_code}"
            logger.warning(f"OpenRouteService rejected request ({response.status_code}): {message}")
            raise RoutingError(self.service_name, message)
        data = self._json(response)
        if not isinstance(data, dict):
            raise RoutingError(self.service_name, "Unexpected response body.")
        return data

    def _request_route(self, request: RouteRequest) -> RouteResult:
        if request.mode == "matrix":
            return self.matrix(request)
        if request.mode == "directions":
            return self.directions(request)
        raise ValueError(f"OpenRouteService cannot serve routing mode '{request.mode}'.")

    def matrix(self, request: RouteRequest) -> RouteResult:
        """Pairwise distances; stops keep their input order."""
        url = f"{self.base_url}/v2/matrix/{self.profile}"
        logger.debug(f"Requesting ORS matrix for {len(request.coordinates)} locations")
        data = self._post(url, payload_for(request))

        distances = data.get("distances")
        if not distances:
            raise RoutingError(self.service_name, _error_message(data) or "Response missing distances.")
        durations = data.get("durations")

        count = len(request.coordinates)
        total_km = 0.0
        total_seconds = 0.0
        for origin in range(count - 1):
            leg_km = distances[origin][origin + 1]
            if leg_km is None:
                raise RoutingError(self.service_name, f"No route between stop {origin} and stop {origin + 1}.")
            total_km += float(leg_km)
            if durations:
                total_seconds += float(durations[origin][origin + 1] or 0.0)

        # units=km: distances already in kilometers, durations always in seconds
        if request.units == "km":
            distance_km = round2(total_km)
        else:
            distance_km = meters_to_km(total_km)

        return RouteResult(
            stop_order=tuple(range(count)),
            stop_coordinates=request.coordinates,
            geometry=request.coordinates,
            distance_km=distance_km,
            duration_min=seconds_to_minutes(total_seconds),
            metadata={"service": self.service_name, "mode": "matrix", "has_durations": bool(durations)},
        )

    def directions(self, request: RouteRequest) -> RouteResult:
        """One concrete path in input order with its geometry."""
        url = f"{self.base_url}/v2/directions/{self.profile}/geojson"
        logger.debug(f"Requesting ORS directions for {len(request.coordinates)} waypoints")
        data = self._post(url, payload_for(request))

        features = data.get("features") or []
        if not features:
            raise RoutingError(self.service_name, _error_message(data) or "Response contained no route.")
        feature = features[0]
        if not isinstance(feature, dict):
            raise RoutingError(self.service_name, "Unexpected response body.")
        geometry = [
            Coordinate(longitude=float(point[0]), latitude=float(point[1]))
            for point in feature.get("geometry", {}).get("coordinates", [])
        ]
        segments = feature.get("properties", {}).get("segments") or []
        if not segments:
            raise RoutingError(self.service_name, "Response missing route segments.")
        # Two waypoints give exactly one segment; longer routes have one per leg
        distance_m = sum(float(segment.get("distance", 0.0)) for segment in segments)
        duration_s = sum(float(segment.get("duration", 0.0)) for segment in segments)

        return RouteResult(
            stop_order=tuple(range(len(request.coordinates))),
            stop_coordinates=request.coordinates,
            geometry=tuple(geometry) or request.coordinates,
            distance_km=meters_to_km(distance_m),
            duration_min=seconds_to_minutes(duration_s),
            metadata={"service": self.service_name, "mode": "directions", "segments": len(segments)},
        )
