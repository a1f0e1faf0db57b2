"""
HTTP routes for the Love Journey API.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from journey.connector import StorageConnector
from journey.dependencies import get_connector, get_repository
from journey.repository import DestinationRepository
from journey.schemas import (
    ClearRequest,
    ClearResponse,
    DestinationListResponse,
    DestinationResponse,
    HealthResponse,
    ImportRequest,
    ImportResponse,
    MessageResponse,
)

router = APIRouter()
health_router = APIRouter()


@health_router.get("/health", response_model=HealthResponse)
def health(connector: StorageConnector = Depends(get_connector)):
    """Report connector readiness for load balancers and orchestrators."""
    ready = connector.is_ready()
    body = HealthResponse(
        status="healthy" if ready else "connecting",
        mongodb="connected" if ready else "disconnected",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return JSONResponse(status_code=200 if ready else 503, content=body.model_dump())


@router.get("/destinations", response_model=DestinationListResponse)
def list_destinations(repo: DestinationRepository = Depends(get_repository)):
    destinations = [dest.to_wire() for dest in repo.list_destinations()]
    return DestinationListResponse(data=destinations, count=len(destinations))


@router.post("/destinations", response_model=DestinationResponse)
def add_destination(
    payload: Optional[dict[str, Any]] = Body(None),
    repo: DestinationRepository = Depends(get_repository),
):
    destination = repo.create(payload or {})
    return DestinationResponse(
        data=destination.to_wire(), message="Destination added successfully"
    )


@router.post("/destinations/clear", response_model=ClearResponse)
def clear_destinations(
    payload: Optional[ClearRequest] = None,
    repo: DestinationRepository = Depends(get_repository),
):
    deleted = repo.clear(payload.password if payload else None)
    return ClearResponse(message=f"Cleared {deleted} destinations", deletedCount=deleted)


@router.post("/destinations/import", response_model=ImportResponse)
def import_destinations(
    payload: Optional[ImportRequest] = None,
    repo: DestinationRepository = Depends(get_repository),
):
    """Replace the journey with an exported list of destinations."""
    payload = payload or ImportRequest()
    count = repo.bulk_import(payload.password, payload.destinations)
    message = f"Imported {count} destinations" if count else "No destinations to import"
    return ImportResponse(message=message, count=count)


@router.put("/destinations/{destination_id}", response_model=MessageResponse)
def update_destination(
    destination_id: str,
    payload: Optional[dict[str, Any]] = Body(None),
    repo: DestinationRepository = Depends(get_repository),
):
    repo.update(destination_id, payload or {})
    return MessageResponse(message="Destination updated successfully")


@router.delete("/destinations/{destination_id}", response_model=MessageResponse)
def delete_destination(
    destination_id: str, repo: DestinationRepository = Depends(get_repository)
):
    repo.delete(destination_id)
    return MessageResponse(message="Destination deleted successfully")
