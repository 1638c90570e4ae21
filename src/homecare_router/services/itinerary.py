"""Join routing results with the user's entries into an ordered itinerary."""

from __future__ import annotations

from typing import Optional, Sequence

from ..models.domain import STARTING_POINT_LABEL, ItineraryItem
from .routing.models import RouteResult


def reconcile(
    route_result: RouteResult,
    addresses: Sequence[str],
    appointment_times: Sequence[Optional[str]],
    starting_point: Optional[str] = None,
) -> list[ItineraryItem]:
    """Build itinerary items in the order returned by the routing service.

    When ``starting_point`` is given it was request index 0: it becomes item 0
    and request index ``i`` maps to ``addresses[i - 1]``.
    """
    if len(addresses) != len(appointment_times):
        raise ValueError(
            f"Addresses and appointment times differ in length ({len(addresses)} vs {len(appointment_times)})."
        )

    offset = 1 if starting_point is not None else 0
    expected = len(addresses) + offset
    if sorted(route_result.stop_order) != list(range(expected)):
        raise ValueError(
            f"Route stop order {list(route_result.stop_order)} is not a permutation of {expected} stops."
        )

    items: list[ItineraryItem] = []
    if starting_point is not None:
        items.append(
            ItineraryItem(
                position=0,
                label=STARTING_POINT_LABEL,
                address=starting_point,
                appointment_time=None,
                coordinate=route_result.stop_coordinates[0],
                is_starting_point=True,
            )
        )

    for request_index in route_result.stop_order:
        if request_index < offset:
            continue
        entry_index = request_index - offset
        items.append(
            ItineraryItem(
                position=len(items),
                label=addresses[entry_index],
                address=addresses[entry_index],
                appointment_time=appointment_times[entry_index],
                coordinate=route_result.stop_coordinates[request_index],
            )
        )
    return items
