"""Base class for routing backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..http import HttpServiceClient
from .models import RouteRequest, RouteResult, trivial_route


class RoutingBackend(HttpServiceClient, ABC):
    """Contract for routing/optimization services."""

    mode: str
    profile: str

    def request_route(self, request: RouteRequest) -> RouteResult:
        if len(request.coordinates) < 2:
            return trivial_route(request)
        return self._request_route(request)

    @abstractmethod
    def _request_route(self, request: RouteRequest) -> RouteResult:
        raise NotImplementedError
