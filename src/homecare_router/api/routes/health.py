"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...config import settings
from ...services.optimizer import RouteOptimizer
from .itinerary import get_optimizer

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root(optimizer: RouteOptimizer = Depends(get_optimizer)) -> dict:
    """Liveness plus the configured backends. Never calls the external services."""
    return {
        "status": "ok",
        "geocoder": settings.geocoder,
        "routing_backend": settings.routing_backend,
        "routing_mode": optimizer.routing_mode,
        "starting_point_configured": optimizer.starting_point is not None,
    }
