"""Route optimization workflow.

``RouteOptimizer`` owns the visit form, the workflow state and the last
published itinerary. One ``optimize()`` call runs the whole pipeline:

    idle -> validating -> geocoding -> requesting_route -> reconciled

Any failure moves the workflow to ``failed`` and re-raises the error; the
previously published itinerary stays in place. Editing the form returns the
workflow to ``idle``.

Callers must not start a second ``optimize()`` while one is running (the UI
disables the button); the workflow itself does no locking.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..config import settings
from ..errors import AddressNotFoundError, RouteOptimizerError, ValidationError
from ..models.domain import AddressEntry, Coordinate, PublishedItinerary, RouteSummary, WorkflowState
from .geocoding import Geocoder, get_geocoder
from .itinerary import reconcile
from .routing.base import RoutingBackend
from .routing.dispatcher import get_routing_backend
from .routing.request_builder import build_request
from .traffic import TimeOfDayTrafficModel, TrafficModel, adjust_duration

logger = logging.getLogger(__name__)

_UNSET = object()


class RouteOptimizer:
    def __init__(
        self,
        geocoder: Geocoder | None = None,
        router: RoutingBackend | None = None,
        traffic_model: TrafficModel | None = None,
        clock: Callable[[], datetime] | None = None,
        starting_point: Optional[str] | object = _UNSET,
        concurrency: str | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._geocoder = geocoder
        self._router = router
        self.traffic_model = traffic_model or TimeOfDayTrafficModel()
        self._clock = clock or datetime.now
        self.starting_point: Optional[str] = (
            settings.starting_point if starting_point is _UNSET else starting_point  # type: ignore[assignment]
        )
        self.concurrency = concurrency or settings.geocode_concurrency
        self.max_workers = max_workers or settings.geocode_max_workers

        self._entries: list[AddressEntry] = [AddressEntry(address="")]
        self.state = WorkflowState.IDLE
        self.failure: Exception | None = None
        self.published: PublishedItinerary | None = None

    # Backends are built on first use so a missing credential only surfaces when needed.
    @property
    def geocoder(self) -> Geocoder:
        if self._geocoder is None:
            self._geocoder = get_geocoder()
        return self._geocoder

    @property
    def router(self) -> RoutingBackend:
        if self._router is None:
            self._router = get_routing_backend()
        return self._router

    @property
    def routing_mode(self) -> str:
        """Mode of the routing backend in use, read without building it."""
        if self._router is not None:
            return self._router.mode
        return "optimized-trip" if settings.routing_backend == "mapbox" else settings.routing_mode

    # Form --------------------------------------------------------------

    @property
    def entries(self) -> tuple[AddressEntry, ...]:
        return tuple(self._entries)

    @property
    def addresses(self) -> list[str]:
        return [entry.address for entry in self._entries]

    @property
    def appointment_times(self) -> list[Optional[str]]:
        return [entry.appointment_time for entry in self._entries]

    def add_address(self, address: str = "", appointment_time: Optional[str] = None) -> int:
        self._entries.append(AddressEntry(address=address, appointment_time=_clean_time(appointment_time)))
        self._edited()
        return len(self._entries) - 1

    def update_address(self, index: int, address: str) -> None:
        entry = self._entries[index]
        self._entries[index] = AddressEntry(address=address, appointment_time=entry.appointment_time)
        self._edited()

    def update_appointment_time(self, index: int, appointment_time: Optional[str]) -> None:
        entry = self._entries[index]
        self._entries[index] = AddressEntry(address=entry.address, appointment_time=_clean_time(appointment_time))
        self._edited()

    def remove_address(self, index: int) -> None:
        del self._entries[index]
        self._edited()

    def replace_entries(
        self,
        addresses: Sequence[str],
        appointment_times: Sequence[Optional[str]] | None = None,
    ) -> None:
        times = list(appointment_times) if appointment_times is not None else [None] * len(addresses)
        if len(times) != len(addresses):
            raise ValidationError(
                f"Got {len(addresses)} addresses but {len(times)} appointment times."
            )
        self._entries = [
            AddressEntry(address=address, appointment_time=_clean_time(time))
            for address, time in zip(addresses, times)
        ]
        self._edited()

    def _edited(self) -> None:
        self.state = WorkflowState.IDLE
        self.failure = None

    # Workflow ----------------------------------------------------------

    def optimize(self) -> PublishedItinerary:
        """Run one optimization attempt and publish its itinerary."""
        moment = self._clock()
        entries = list(self._entries)
        logger.info(f"Starting route optimization for {len(entries)} addresses")
        try:
            self.state = WorkflowState.VALIDATING
            self._validate(entries)

            self.state = WorkflowState.GEOCODING
            start_coordinate, coordinates = self._geocode_all(entries)

            self.state = WorkflowState.REQUESTING_ROUTE
            request = build_request(
                coordinates,
                mode=self.router.mode,
                profile=self.router.profile,
                starting_point=start_coordinate,
            )
            result = self.router.request_route(request)

            multiplier = self.traffic_model.multiplier(moment)
            items = reconcile(
                result,
                [entry.address for entry in entries],
                [entry.appointment_time for entry in entries],
                starting_point=self.starting_point,
            )
            summary = RouteSummary(
                distance_km=result.distance_km,
                duration_min=adjust_duration(result.duration_min, multiplier),
                raw_duration_min=result.duration_min,
                traffic_multiplier=multiplier,
                stop_count=len(items),
            )
            published = PublishedItinerary(items=tuple(items), summary=summary, geometry=result.geometry)
        except RouteOptimizerError as exc:
            self._fail(exc)
            raise
        except Exception as exc:
            logger.exception(f"Unexpected error optimizing route: {exc}")
            self._fail(exc)
            raise

        self.published = published
        self.state = WorkflowState.RECONCILED
        self.failure = None
        logger.info(
            f"Route optimized: {summary.stop_count} stops, {summary.distance_km} km, "
            f"{summary.duration_min} min (traffic x{summary.traffic_multiplier})"
        )
        return published

    def _fail(self, exc: Exception) -> None:
        self.state = WorkflowState.FAILED
        self.failure = exc
        logger.warning(f"Route optimization failed in {type(exc).__name__}: {exc}")

    def _validate(self, entries: Sequence[AddressEntry]) -> None:
        if not entries:
            raise ValidationError("Add at least one address.")
        if any(not entry.address.strip() for entry in entries):
            raise ValidationError("Please fill in all addresses.")

    def _geocode_all(self, entries: Sequence[AddressEntry]) -> tuple[Coordinate | None, list[Coordinate]]:
        start_coordinate = None
        if self.starting_point is not None:
            start_coordinate = self.geocoder.geocode(self.starting_point)
            if start_coordinate is None:
                raise AddressNotFoundError(self.starting_point)

        addresses = [entry.address for entry in entries]
        coordinates: list[Coordinate] = []
        if self.concurrency == "concurrent" and len(addresses) > 1:
            workers = min(self.max_workers, len(addresses))
            logger.debug(f"Geocoding {len(addresses)} addresses with {workers} workers")
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="geocode") as executor:
                futures = [executor.submit(self.geocoder.geocode, address) for address in addresses]
            # Joined in input order, so an earlier miss wins over a later failure
            for position, (address, future) in enumerate(zip(addresses, futures)):
                coordinates.append(_found(address, position, future.result()))
        else:
            for position, address in enumerate(addresses):
                coordinates.append(_found(address, position, self.geocoder.geocode(address)))
        return start_coordinate, coordinates


def _found(address: str, position: int, coordinate: Coordinate | None) -> Coordinate:
    if coordinate is None:
        raise AddressNotFoundError(address, position)
    return coordinate


def _clean_time(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = value.strip()
    return text or None
