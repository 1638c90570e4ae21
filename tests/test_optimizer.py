from datetime import datetime

import pytest

from homecare_router.config import settings
from homecare_router.errors import AddressNotFoundError, RoutingError, TransportError, ValidationError
from homecare_router.models.domain import STARTING_POINT_LABEL, Coordinate, WorkflowState
from homecare_router.services.optimizer import RouteOptimizer
from homecare_router.services.routing.models import RouteRequest, RouteResult, trivial_route

KNOWN = {
    "Office": Coordinate(longitude=-46.64, latitude=-23.54),
    "Rua A": Coordinate(longitude=-46.63, latitude=-23.55),
    "Rua B": Coordinate(longitude=-46.65, latitude=-23.56),
    "Rua C": Coordinate(longitude=-46.60, latitude=-23.58),
}


class DummyGeocoder:
    def __init__(self, known=None, fail_on=None):
        self.known = KNOWN if known is None else known
        self.fail_on = fail_on
        self.calls = []

    def geocode(self, address):
        self.calls.append(address)
        if address == self.fail_on:
            raise TransportError("OpenCage", "connection refused")
        return self.known.get(address.strip())


class DummyRouter:
    mode = "optimized-trip"
    profile = "mapbox/driving"

    def __init__(self, order=None, error=None, distance_km=12.35, duration_min=100.0):
        self.order = order
        self.error = error
        self.distance_km = distance_km
        self.duration_min = duration_min
        self.requests: list[RouteRequest] = []

    def request_route(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        if len(request.coordinates) < 2:
            return trivial_route(request)
        order = tuple(self.order) if self.order is not None else tuple(range(len(request.coordinates)))
        return RouteResult(
            stop_order=order,
            stop_coordinates=request.coordinates,
            geometry=tuple(request.coordinates[i] for i in order),
            distance_km=self.distance_km,
            duration_min=self.duration_min,
        )


def _clock(hour):
    return lambda: datetime(2024, 5, 6, hour, 15)


def _optimizer(geocoder=None, router=None, hour=8, starting_point=None, concurrency="sequential"):
    return RouteOptimizer(
        geocoder=geocoder or DummyGeocoder(),
        router=router or DummyRouter(),
        clock=_clock(hour),
        starting_point=starting_point,
        concurrency=concurrency,
    )


def test_successful_run_publishes_itinerary_and_summary():
    router = DummyRouter()
    optimizer = _optimizer(router=router, hour=8)
    optimizer.replace_entries(["Rua A", "Rua B", "Rua C"], ["09:00", "10:30", None])

    published = optimizer.optimize()

    assert optimizer.state is WorkflowState.RECONCILED
    assert optimizer.published is published
    assert [item.label for item in published.items] == ["Rua A", "Rua B", "Rua C"]
    assert published.summary.distance_km == 12.35
    assert published.summary.raw_duration_min == 100.0
    assert published.summary.duration_min == 130.0
    assert published.summary.traffic_multiplier == 1.3
    assert len(router.requests) == 1
    assert router.requests[0].coordinates == (KNOWN["Rua A"], KNOWN["Rua B"], KNOWN["Rua C"])


def test_reordered_waypoints_drive_itinerary_order():
    optimizer = _optimizer(router=DummyRouter(order=[2, 0, 1]), hour=22)
    optimizer.replace_entries(["Rua A", "Rua B", "Rua C"], ["09:00", "10:00", "11:00"])

    published = optimizer.optimize()

    assert [item.address for item in published.items] == ["Rua C", "Rua A", "Rua B"]
    assert [item.appointment_time for item in published.items] == ["11:00", "09:00", "10:00"]
    assert published.summary.duration_min == 100.0


def test_starting_point_adds_leading_item():
    geocoder = DummyGeocoder()
    router = DummyRouter()
    optimizer = _optimizer(geocoder=geocoder, router=router, hour=12, starting_point="Office")
    optimizer.replace_entries(["Rua A", "Rua B"])

    published = optimizer.optimize()

    assert len(published.items) == 3
    assert published.items[0].label == STARTING_POINT_LABEL
    assert published.items[0].appointment_time is None
    assert geocoder.calls == ["Office", "Rua A", "Rua B"]
    assert router.requests[0].has_starting_point
    assert published.summary.duration_min == 110.0


def test_blank_address_fails_validation_without_network_calls():
    geocoder = DummyGeocoder()
    router = DummyRouter()
    optimizer = _optimizer(geocoder=geocoder, router=router)
    optimizer.replace_entries(["Rua A", "   "])

    with pytest.raises(ValidationError):
        optimizer.optimize()

    assert optimizer.state is WorkflowState.FAILED
    assert isinstance(optimizer.failure, ValidationError)
    assert geocoder.calls == []
    assert router.requests == []
    assert optimizer.published is None


def test_new_optimizer_starts_with_one_blank_entry():
    optimizer = _optimizer()

    assert optimizer.addresses == [""]
    with pytest.raises(ValidationError):
        optimizer.optimize()


def test_not_found_address_names_it_and_keeps_previous_itinerary():
    optimizer = _optimizer()
    optimizer.replace_entries(["Rua A", "Rua B"])
    previous = optimizer.optimize()

    optimizer.replace_entries(["Rua A", "Unknown avenue 99", "Rua B"])
    with pytest.raises(AddressNotFoundError) as excinfo:
        optimizer.optimize()

    assert excinfo.value.address == "Unknown avenue 99"
    assert excinfo.value.position == 1
    assert "Unknown avenue 99" in str(excinfo.value)
    assert optimizer.state is WorkflowState.FAILED
    assert optimizer.published is previous


def test_not_found_stops_before_routing():
    router = DummyRouter()
    optimizer = _optimizer(router=router)
    optimizer.replace_entries(["Nowhere"])

    with pytest.raises(AddressNotFoundError):
        optimizer.optimize()

    assert router.requests == []


def test_unknown_starting_point_fails_run():
    optimizer = _optimizer(starting_point="Lost office")
    optimizer.replace_entries(["Rua A"])

    with pytest.raises(AddressNotFoundError) as excinfo:
        optimizer.optimize()

    assert excinfo.value.address == "Lost office"


def test_routing_error_fails_run_and_keeps_previous_itinerary():
    router = DummyRouter()
    optimizer = _optimizer(router=router)
    optimizer.replace_entries(["Rua A", "Rua B"])
    previous = optimizer.optimize()

    router.error = RoutingError("Mapbox Optimized Trips", "Too many coordinates")
    optimizer.update_address(1, "Rua C")
    with pytest.raises(RoutingError) as excinfo:
        optimizer.optimize()

    assert excinfo.value.service_message == "Too many coordinates"
    assert optimizer.state is WorkflowState.FAILED
    assert optimizer.published is previous


def test_transport_error_during_geocoding_fails_run():
    optimizer = _optimizer(geocoder=DummyGeocoder(fail_on="Rua B"))
    optimizer.replace_entries(["Rua A", "Rua B"])

    with pytest.raises(TransportError):
        optimizer.optimize()

    assert optimizer.state is WorkflowState.FAILED
    assert optimizer.published is None


def test_edit_resets_failed_state_to_idle():
    optimizer = _optimizer()
    optimizer.replace_entries(["Rua A", ""])
    with pytest.raises(ValidationError):
        optimizer.optimize()

    optimizer.update_address(1, "Rua B")

    assert optimizer.state is WorkflowState.IDLE
    assert optimizer.failure is None


def test_form_edits_keep_addresses_and_times_aligned():
    optimizer = _optimizer()
    optimizer.update_address(0, "Rua A")
    optimizer.add_address("Rua B", "14:00")
    optimizer.add_address()
    optimizer.update_appointment_time(0, " 08:00 ")
    optimizer.remove_address(2)

    assert optimizer.addresses == ["Rua A", "Rua B"]
    assert optimizer.appointment_times == ["08:00", "14:00"]


def test_replace_entries_rejects_mismatched_times():
    optimizer = _optimizer()
    with pytest.raises(ValidationError):
        optimizer.replace_entries(["Rua A", "Rua B"], ["09:00"])


def test_single_address_without_start_publishes_one_item():
    optimizer = _optimizer()
    optimizer.replace_entries(["Rua A"])

    published = optimizer.optimize()

    assert len(published.items) == 1
    assert published.summary.distance_km == 0.0


def test_concurrent_geocoding_preserves_input_order():
    router = DummyRouter()
    optimizer = _optimizer(router=router, concurrency="concurrent")
    optimizer.replace_entries(["Rua C", "Rua A", "Rua B"])

    published = optimizer.optimize()

    assert router.requests[0].coordinates == (KNOWN["Rua C"], KNOWN["Rua A"], KNOWN["Rua B"])
    assert [item.address for item in published.items] == ["Rua C", "Rua A", "Rua B"]


def test_concurrent_geocoding_reports_first_missing_address():
    optimizer = _optimizer(concurrency="concurrent")
    optimizer.replace_entries(["Rua A", "Missing 1", "Missing 2"])

    with pytest.raises(AddressNotFoundError) as excinfo:
        optimizer.optimize()

    assert excinfo.value.address == "Missing 1"


@pytest.mark.parametrize("concurrency", ["sequential", "concurrent"])
def test_missing_address_wins_over_later_transport_failure(concurrency):
    geocoder = DummyGeocoder(fail_on="Rua B")
    optimizer = _optimizer(geocoder=geocoder, concurrency=concurrency)
    optimizer.replace_entries(["Unknown st", "Rua B"])

    with pytest.raises(AddressNotFoundError) as excinfo:
        optimizer.optimize()

    assert excinfo.value.address == "Unknown st"
    assert excinfo.value.position == 0
    assert optimizer.state is WorkflowState.FAILED


def test_concurrent_transport_failure_is_reported_when_nothing_is_missing():
    optimizer = _optimizer(geocoder=DummyGeocoder(fail_on="Rua B"), concurrency="concurrent")
    optimizer.replace_entries(["Rua A", "Rua B", "Rua C"])

    with pytest.raises(TransportError):
        optimizer.optimize()


def test_identical_runs_publish_identical_results():
    optimizer = _optimizer(router=DummyRouter(order=[1, 0]))
    optimizer.replace_entries(["Rua A", "Rua B"], ["09:00", "10:00"])

    first = optimizer.optimize()
    second = optimizer.optimize()

    assert first == second
    assert first is not second


def test_multiplier_recomputed_on_each_run():
    hours = iter([8, 22])
    optimizer = RouteOptimizer(
        geocoder=DummyGeocoder(),
        router=DummyRouter(),
        clock=lambda: datetime(2024, 5, 6, next(hours), 0),
        starting_point=None,
    )
    optimizer.replace_entries(["Rua A", "Rua B"])

    assert optimizer.optimize().summary.duration_min == 130.0
    assert optimizer.optimize().summary.duration_min == 100.0


def test_routing_mode_prefers_injected_router(monkeypatch):
    monkeypatch.setattr(settings, "routing_backend", "openrouteservice")
    monkeypatch.setattr(settings, "routing_mode", "directions")

    assert _optimizer().routing_mode == "optimized-trip"
    unbuilt = RouteOptimizer(geocoder=DummyGeocoder(), starting_point=None)
    assert unbuilt.routing_mode == "directions"
    assert unbuilt._router is None
