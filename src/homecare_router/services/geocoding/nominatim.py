"""Nominatim (OpenStreetMap) search geocoding."""

from __future__ import annotations

from typing import Any

from ...config import settings
from ...errors import TransportError
from ...models.domain import Coordinate
from .base import Geocoder, parse_coordinate


class NominatimGeocoder(Geocoder):
    service_name = "Nominatim"

    def __init__(self, base_url: str | None = None, user_agent: str | None = None, **kwargs: Any) -> None:
        super().__init__(base_url or settings.nominatim_base_url, **kwargs)
        self.user_agent = user_agent or settings.nominatim_user_agent

    def _search_url(self) -> str:
        return f"{self.base_url}/search"

    def _params(self, query: str) -> dict[str, Any]:
        return {"q": query, "format": "jsonv2", "limit": 1}

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent}

    def _first_match(self, data: Any) -> Coordinate | None:
        if not isinstance(data, list) or not data:
            return None
        first = data[0]
        if not isinstance(first, dict):
            raise TransportError(self.service_name, "Unexpected response body.")
        # Nominatim returns coordinates as strings
        return parse_coordinate(first.get("lon"), first.get("lat"), self.service_name)
