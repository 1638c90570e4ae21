"""OpenCage forward geocoding."""

from __future__ import annotations

from typing import Any

from ...config import settings
from ...errors import TransportError
from ...models.domain import Coordinate
from .base import Geocoder, parse_coordinate


class OpenCageGeocoder(Geocoder):
    service_name = "OpenCage"

    def __init__(self, api_key: str | None = None, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(base_url or settings.opencage_base_url, **kwargs)
        self.api_key = api_key or settings.opencage_api_key
        if not self.api_key:
            raise ValueError("OpenCage API key is not configured.")

    def _search_url(self) -> str:
        return f"{self.base_url}/geocode/v1/json"

    def _params(self, query: str) -> dict[str, Any]:
        return {"q": query, "key": self.api_key, "limit": 1, "no_annotations": 1}

    def _first_match(self, data: Any) -> Coordinate | None:
        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            return None
        if not isinstance(results, list) or not isinstance(results[0], dict):
            raise TransportError(self.service_name, "Unexpected response body.")
        geometry = results[0].get("geometry") or {}
        if not isinstance(geometry, dict):
            raise TransportError(self.service_name, "Unexpected response body.")
        return parse_coordinate(geometry.get("lng"), geometry.get("lat"), self.service_name)
