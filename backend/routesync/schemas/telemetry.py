"""
Telemetry snapshot schema - live vehicle positions and Map View dropdowns.

Field names follow the telemetry site's JSON (camelCase).
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from routesync.services.coordinates import LocationMaps, VehiclePosition, build_vehicle_positions
from routesync.services.records import LocationReference


class LiveVehiclePosition(BaseModel):
    vehicle_number: str = Field(alias="vehicleNumber")
    lat: Optional[float] = None
    lng: Optional[float] = None

    class Config:
        populate_by_name = True


class CityOption(BaseModel):
    item_name: str = Field(alias="itemName")
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    class Config:
        populate_by_name = True


class LandmarkOption(BaseModel):
    item_name: str = Field(alias="itemName")
    lat: Optional[float] = None
    lng: Optional[float] = None

    class Config:
        populate_by_name = True


class TelemetrySnapshot(BaseModel):
    vehicles: List[LiveVehiclePosition] = []
    cities: List[CityOption] = []
    landmarks: List[LandmarkOption] = []

    def location_maps(self) -> LocationMaps:
        return LocationMaps.from_dropdowns(
            [LocationReference(name=c.item_name, latitude=c.latitude, longitude=c.longitude) for c in self.cities],
            [LocationReference(name=lm.item_name, latitude=lm.lat, longitude=lm.lng) for lm in self.landmarks],
        )

    def vehicle_positions(self):
        return build_vehicle_positions(
            VehiclePosition(vehicle_number=v.vehicle_number, lat=v.lat, lng=v.lng) for v in self.vehicles
        )
