"""Itinerary endpoints used by the list and map views."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse

from ...errors import AddressNotFoundError, RouteOptimizerError, RoutingError, TransportError, ValidationError
from ...schemas.itinerary import (
    AddressEntryModel,
    FormResponse,
    ItineraryResponse,
    OptimizeRequest,
    VisitForm,
    WorkflowStatusModel,
)
from ...services.optimizer import RouteOptimizer
from ...services.outputs import itinerary_to_csv, itinerary_to_geojson, itinerary_to_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/itinerary", tags=["itinerary"])


@lru_cache(maxsize=1)
def get_optimizer() -> RouteOptimizer:
    """The single workflow instance backing this (single-user) app."""
    return RouteOptimizer()


def _status(optimizer: RouteOptimizer) -> WorkflowStatusModel:
    failure = optimizer.failure
    return WorkflowStatusModel(
        state=optimizer.state,
        error_kind=getattr(failure, "kind", "error") if failure else None,
        error=str(failure) if failure else None,
    )


def _form(optimizer: RouteOptimizer) -> FormResponse:
    return FormResponse(
        entries=[
            AddressEntryModel(address=entry.address, appointment_time=entry.appointment_time)
            for entry in optimizer.entries
        ],
        status=_status(optimizer),
    )


@router.get("/form", response_model=FormResponse, status_code=status.HTTP_200_OK)
def read_form(optimizer: RouteOptimizer = Depends(get_optimizer)) -> FormResponse:
    return _form(optimizer)


@router.put("/form", response_model=FormResponse, status_code=status.HTTP_200_OK)
def replace_form(payload: VisitForm, optimizer: RouteOptimizer = Depends(get_optimizer)) -> FormResponse:
    try:
        optimizer.replace_entries(payload.addresses, payload.appointment_times)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _form(optimizer)


@router.post("/optimize", response_model=ItineraryResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRequest, optimizer: RouteOptimizer = Depends(get_optimizer)) -> ItineraryResponse:
    try:
        if payload.form is not None:
            optimizer.replace_entries(payload.form.addresses, payload.form.appointment_times)
        published = optimizer.optimize()
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AddressNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (RoutingError, TransportError) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except RouteOptimizerError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}",
        ) from exc
    return ItineraryResponse.from_published(published, _status(optimizer))


@router.get("", response_model=ItineraryResponse, status_code=status.HTTP_200_OK)
def read_itinerary(optimizer: RouteOptimizer = Depends(get_optimizer)) -> ItineraryResponse:
    if optimizer.published is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No itinerary has been published yet.")
    return ItineraryResponse.from_published(optimizer.published, _status(optimizer))


@router.get("/export", status_code=status.HTTP_200_OK)
def export_itinerary(
    format: Literal["json", "csv", "geojson"] = Query(default="json", description="Output format"),
    optimizer: RouteOptimizer = Depends(get_optimizer),
):
    published = optimizer.published
    if published is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No itinerary has been published yet.")
    if format == "csv":
        return Response(
            content=itinerary_to_csv(published),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="itinerary.csv"'},
        )
    if format == "geojson":
        return JSONResponse(content=itinerary_to_geojson(published), media_type="application/geo+json")
    return itinerary_to_json(published)
