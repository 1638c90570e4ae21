"""Base class for geocoding backends."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from ...errors import TransportError, ValidationError
from ...models.domain import Coordinate
from ..http import HttpServiceClient

logger = logging.getLogger(__name__)


class Geocoder(HttpServiceClient, ABC):
    """Resolve one free-text address to a coordinate.

    Returns ``None`` when the service has no match. The first match wins;
    ambiguous addresses are not disambiguated.
    """

    def geocode(self, address: str) -> Coordinate | None:
        query = (address or "").strip()
        if not query:
            raise ValidationError("Address must not be empty.")

        response = self._send("GET", self._search_url(), params=self._params(query), headers=self._headers())
        if response.is_error:
            logger.warning(f"{self.service_name} returned HTTP {response.status_code} for '{query}'")
            raise TransportError(self.service_name, f"HTTP {response.status_code}")

        coordinate = self._first_match(self._json(response))
        if coordinate is None:
            logger.info(f"{self.service_name} found no match for '{query}'")
        return coordinate

    def _headers(self) -> dict[str, str]:
        return {}

    @abstractmethod
    def _search_url(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def _params(self, query: str) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def _first_match(self, data: Any) -> Coordinate | None:
        raise NotImplementedError


def parse_coordinate(lon: Any, lat: Any, service: str) -> Coordinate:
    try:
        return Coordinate(longitude=float(lon), latitude=float(lat))
    except (TypeError, ValueError) as e:
        raise TransportError(service, f"Malformed coordinate in response: {e}") from e
