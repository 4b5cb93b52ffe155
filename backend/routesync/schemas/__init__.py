from .live_route import (
    VehicleEntryResponse,
    SideBucketResponse,
    LiveRouteResponse,
    RouteKeyConflictResponse,
    SyncSummary,
)
from .unmatched import UnmatchedTripSideResponse, UnmatchedTripSideUpdate
from .trip import TripIngestSummary
from .telemetry import TelemetrySnapshot

__all__ = [
    "VehicleEntryResponse",
    "SideBucketResponse",
    "LiveRouteResponse",
    "RouteKeyConflictResponse",
    "SyncSummary",
    "UnmatchedTripSideResponse",
    "UnmatchedTripSideUpdate",
    "TripIngestSummary",
    "TelemetrySnapshot",
]
