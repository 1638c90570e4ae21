"""Itinerary request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.domain import PublishedItinerary, WorkflowState


class AddressEntryModel(BaseModel):
    address: str = Field(..., description="Free-text address of the visit.")
    appointment_time: Optional[str] = Field(default=None, description="Appointment time, usually HH:MM.")


class VisitForm(BaseModel):
    addresses: List[str] = Field(..., description="Visit addresses in the order they were entered.")
    appointment_times: Optional[List[Optional[str]]] = Field(
        default=None,
        description="Appointment time per address. Omit to leave every time empty.",
    )

    @model_validator(mode="after")
    def _same_length(self) -> "VisitForm":
        if self.appointment_times is not None and len(self.appointment_times) != len(self.addresses):
            raise ValueError("addresses and appointment_times must have the same length")
        return self


class OptimizeRequest(BaseModel):
    form: Optional[VisitForm] = Field(
        default=None,
        description="Replaces the current form before optimizing. Omit to optimize the current form.",
    )


class CoordinateModel(BaseModel):
    longitude: float
    latitude: float


class ItineraryItemModel(BaseModel):
    position: int
    label: str
    address: str
    appointment_time: Optional[str]
    time_label: str
    is_starting_point: bool
    coordinate: CoordinateModel


class RouteSummaryModel(BaseModel):
    distance_km: float
    duration_min: float
    raw_duration_min: float
    traffic_multiplier: float
    stop_count: int


class WorkflowStatusModel(BaseModel):
    state: WorkflowState
    error_kind: Optional[str] = None
    error: Optional[str] = None


class FormResponse(BaseModel):
    entries: List[AddressEntryModel]
    status: WorkflowStatusModel


class ItineraryResponse(BaseModel):
    status: WorkflowStatusModel
    summary: RouteSummaryModel
    items: List[ItineraryItemModel]
    geometry: List[CoordinateModel]

    @classmethod
    def from_published(cls, itinerary: PublishedItinerary, status: WorkflowStatusModel) -> "ItineraryResponse":
        return cls(
            status=status,
            summary=RouteSummaryModel(
                distance_km=itinerary.summary.distance_km,
                duration_min=itinerary.summary.duration_min,
                raw_duration_min=itinerary.summary.raw_duration_min,
                traffic_multiplier=itinerary.summary.traffic_multiplier,
                stop_count=itinerary.summary.stop_count,
            ),
            items=[
                ItineraryItemModel(
                    position=item.position,
                    label=item.label,
                    address=item.address,
                    appointment_time=item.appointment_time,
                    time_label=item.time_label,
                    is_starting_point=item.is_starting_point,
                    coordinate=CoordinateModel(
                        longitude=item.coordinate.longitude,
                        latitude=item.coordinate.latitude,
                    ),
                )
                for item in itinerary.items
            ],
            geometry=[
                CoordinateModel(longitude=point.longitude, latitude=point.latitude)
                for point in itinerary.geometry
            ],
        )
