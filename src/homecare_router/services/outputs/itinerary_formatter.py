"""Serializers for published itineraries."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict
from typing import Any, Dict, List

from ...models.domain import PublishedItinerary


def itinerary_to_json(itinerary: PublishedItinerary) -> dict:
    return {
        "summary": asdict(itinerary.summary),
        "items": [
            {
                "position": item.position,
                "label": item.label,
                "address": item.address,
                "appointment_time": item.appointment_time,
                "time_label": item.time_label,
                "is_starting_point": item.is_starting_point,
                "longitude": item.coordinate.longitude,
                "latitude": item.coordinate.latitude,
            }
            for item in itinerary.items
        ],
        "geometry": [coordinate.as_lon_lat() for coordinate in itinerary.geometry],
    }


def itinerary_to_csv(itinerary: PublishedItinerary) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "position",
        "label",
        "address",
        "time",
        "latitude",
        "longitude",
        "total_distance_km",
        "total_duration_min",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for item in itinerary.items:
        writer.writerow(
            {
                "position": item.position,
                "label": item.label,
                "address": item.address,
                "time": item.time_label,
                "latitude": item.coordinate.latitude,
                "longitude": item.coordinate.longitude,
                "total_distance_km": itinerary.summary.distance_km,
                "total_duration_min": itinerary.summary.duration_min,
            }
        )
    return buffer.getvalue()


def itinerary_to_geojson(itinerary: PublishedItinerary) -> Dict[str, Any]:
    """FeatureCollection for the map view: one Point per stop plus the route line."""
    features: List[Dict[str, Any]] = [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": item.coordinate.as_lon_lat()},
            "properties": {
                "position": item.position,
                "label": item.label,
                "time": item.time_label,
                "is_starting_point": item.is_starting_point,
            },
        }
        for item in itinerary.items
    ]

    # A LineString needs two positions; a single-stop route has no line to draw
    if len(itinerary.geometry) >= 2:
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [coordinate.as_lon_lat() for coordinate in itinerary.geometry],
                },
                "properties": {
                    "distance_km": itinerary.summary.distance_km,
                    "duration_min": itinerary.summary.duration_min,
                },
            }
        )
    return {"type": "FeatureCollection", "features": features}
