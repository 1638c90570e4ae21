"""Geocoding backends."""

from typing import Any

from ...config import settings
from .base import Geocoder
from .nominatim import NominatimGeocoder
from .opencage import OpenCageGeocoder


def get_geocoder(name: str | None = None, **kwargs: Any) -> Geocoder:
    match name or settings.geocoder:
        case "opencage":
            return OpenCageGeocoder(**kwargs)
        case "nominatim":
            return NominatimGeocoder(**kwargs)
        case other:
            raise ValueError(f"Unknown geocoder '{other}'.")


__all__ = [
    "Geocoder",
    "OpenCageGeocoder",
    "NominatimGeocoder",
    "get_geocoder",
]
