"""Factory for routing backends based on configuration."""

from __future__ import annotations

from typing import Any

from ...config import settings
from .base import RoutingBackend
from .mapbox import MapboxOptimizedTripsClient
from .openrouteservice import OpenRouteServiceClient


def get_routing_backend(name: str | None = None, **kwargs: Any) -> RoutingBackend:
    match name or settings.routing_backend:
        case "openrouteservice":
            return OpenRouteServiceClient(**kwargs)
        case "mapbox":
            return MapboxOptimizedTripsClient(**kwargs)
        case other:
            raise ValueError(f"Unknown routing backend '{other}'.")
