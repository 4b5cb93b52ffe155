from .route import Route
from .location import Location
from .live_route import LiveRoute, LiveVehicle
from .unmatched_trip_side import UnmatchedTripSide
from .trip import Vehicle, Trip, VehicleType

__all__ = [
    "Route",
    "Location",
    "LiveRoute",
    "LiveVehicle",
    "UnmatchedTripSide",
    "Vehicle",
    "Trip",
    "VehicleType",
]
