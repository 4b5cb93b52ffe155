"""
Live route schemas.
"""
from pydantic import BaseModel
from datetime import datetime
from typing import Dict, List, Optional


class VehicleEntryResponse(BaseModel):
    vehicle_number: Optional[str] = None
    rps_number: Optional[str] = None
    dispatch_date: Optional[datetime] = None
    last_location_date: Optional[datetime] = None
    last_location: Optional[str] = None
    late_hours: Optional[float] = None
    middle_stops: List[str] = []
    expected_arrival: Optional[datetime] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class SideBucketResponse(BaseModel):
    total_vehicles: int = 0
    late_vehicles: int = 0
    vehicles: List[VehicleEntryResponse] = []


class LiveRouteResponse(BaseModel):
    id: str
    source: str
    destination: str
    source_lat: Optional[float] = None
    source_lng: Optional[float] = None
    dest_lat: Optional[float] = None
    dest_lng: Optional[float] = None
    updated_at: Optional[datetime] = None
    up: SideBucketResponse
    down: SideBucketResponse


class RouteKeyConflictResponse(BaseModel):
    key: str
    kept_id: str
    replaced_id: str

    class Config:
        from_attributes = True


class SyncSummary(BaseModel):
    records: int
    routes: int
    vehicles: int
    unmatched_pairs: int
    unmatched_routes_stored: int
    conflicts: List[RouteKeyConflictResponse] = []
    timings: Dict[str, float] = {}
