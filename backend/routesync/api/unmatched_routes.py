"""
Unmatched route API endpoints - curation of route patterns with no reference route.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from routesync.db.database import get_db
from routesync.models import UnmatchedTripSide
from routesync.schemas.unmatched import UnmatchedTripSideResponse, UnmatchedTripSideUpdate

router = APIRouter()


@router.get("/", response_model=List[UnmatchedTripSideResponse])
async def list_unmatched_routes(
    pending_only: bool = False,
    db: Session = Depends(get_db)
):
    """List stored unmatched route patterns, optionally only those without a side."""
    query = db.query(UnmatchedTripSide)
    if pending_only:
        query = query.filter(UnmatchedTripSide.trip_side.is_(None))
    return query.order_by(UnmatchedTripSide.route_name).all()


@router.patch("/{unmatched_id}", response_model=UnmatchedTripSideResponse)
async def update_unmatched_route(
    unmatched_id: int,
    update: UnmatchedTripSideUpdate,
    db: Session = Depends(get_db)
):
    """Set (or clear) the trip side of an unmatched route pattern."""
    unmatched = db.query(UnmatchedTripSide).filter(UnmatchedTripSide.id == unmatched_id).first()
    if not unmatched:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unmatched route {unmatched_id} not found"
        )

    unmatched.trip_side = update.trip_side
    db.commit()
    db.refresh(unmatched)
    return unmatched
