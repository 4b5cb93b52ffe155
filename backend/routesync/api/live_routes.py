"""
Live route API endpoints.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import List, Optional
from routesync.db.database import get_db
from routesync.schemas.live_route import LiveRouteResponse, SyncSummary
from routesync.schemas.telemetry import TelemetrySnapshot
from routesync.services.file_parser import load_live_export
from routesync.services.live_route_sync import sync_live_routes
from routesync.services.snapshot_store import get_live_route, list_live_routes

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/sync", response_model=SyncSummary)
async def sync_routes(
    export: UploadFile = File(...),
    telemetry: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """Rebuild the live route snapshot from an On Trip export (and optional telemetry JSON)."""
    try:
        records = load_live_export(await export.read(), export.filename or "")
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    location_maps = None
    vehicle_positions = None
    if telemetry is not None:
        try:
            snapshot = TelemetrySnapshot.model_validate_json(await telemetry.read())
        except ValidationError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid telemetry snapshot: {e.errors()}"
            )
        location_maps = snapshot.location_maps()
        vehicle_positions = snapshot.vehicle_positions()

    try:
        return sync_live_routes(
            db,
            records,
            location_maps=location_maps,
            vehicle_positions=vehicle_positions,
        )
    except Exception as e:
        logger.exception("Live route sync failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Live route sync failed: {str(e)}"
        )


@router.get("/", response_model=List[LiveRouteResponse])
async def list_routes(
    db: Session = Depends(get_db)
):
    """List the current live route snapshot."""
    return list_live_routes(db)


@router.get("/{route_id}", response_model=LiveRouteResponse)
async def get_route(
    route_id: str,
    db: Session = Depends(get_db)
):
    route = get_live_route(db, route_id)
    if not route:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Live route {route_id} not found"
        )
    return route
