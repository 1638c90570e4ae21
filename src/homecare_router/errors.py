"""Error taxonomy for the route optimization workflow."""

from __future__ import annotations


class RouteOptimizerError(Exception):
    """Base class for failures that abort an optimization run."""

    kind = "error"


class ValidationError(RouteOptimizerError, ValueError):
    """User input cannot be sent to any service (e.g. a blank address)."""

    kind = "validation"


class AddressNotFoundError(RouteOptimizerError, LookupError):
    """The geocoding service returned no match for an address."""

    kind = "not_found"

    def __init__(self, address: str, position: int | None = None) -> None:
        self.address = address
        self.position = position
        super().__init__(f"Address not found: {address}")


class RoutingError(RouteOptimizerError):
    """The routing service rejected the request."""

    kind = "routing"

    def __init__(self, service: str, message: str | None = None) -> None:
        self.service = service
        self.service_message = message
        detail = message or "no error message returned"
        super().__init__(f"{service} could not optimize the route: {detail}")


class TransportError(RouteOptimizerError):
    """A service could not be reached or answered with an unusable response."""

    kind = "transport"

    def __init__(self, service: str, detail: str | None = None) -> None:
        self.service = service
        self.detail = detail
        super().__init__(f"Failed to connect to {service}. Check your connection and try again.")
