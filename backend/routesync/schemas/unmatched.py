"""
Unmatched route schemas.
"""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from routesync.services.records import RouteSide


class UnmatchedTripSideResponse(BaseModel):
    id: int
    route_name: str
    source: str
    destination: str
    trip_side: Optional[RouteSide] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnmatchedTripSideUpdate(BaseModel):
    trip_side: Optional[RouteSide] = None
