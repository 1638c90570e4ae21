"""Itinerary output serializers."""

from .itinerary_formatter import itinerary_to_csv, itinerary_to_geojson, itinerary_to_json

__all__ = [
    "itinerary_to_json",
    "itinerary_to_csv",
    "itinerary_to_geojson",
]
