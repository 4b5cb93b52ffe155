"""
In-memory record types shared by the merge / resolve / aggregate stages.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class RouteSide(str, enum.Enum):
    UP = "Up"
    DOWN = "Down"

    @classmethod
    def parse(cls, value) -> Optional["RouteSide"]:
        """Map "Up"/"up"/RouteSide.UP etc. to a member; anything else is None."""
        if value is None:
            return None
        if isinstance(value, RouteSide):
            return value
        text = str(getattr(value, "value", value)).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return None


@dataclass(frozen=True)
class RawShipmentRecord:
    """One row of the On Trip grid export. Missing columns are empty strings."""
    vehicle_number: str = ""
    last_location_date: str = ""
    vehicle_group: str = ""
    last_location: str = ""
    speed_kmph: str = ""
    consigner_name: str = ""
    consignee_name: str = ""
    dispatch_date: str = ""
    eta: str = ""
    planned_distance: str = ""
    remaining_distance: str = ""
    trip_status: str = ""
    delay_time: str = ""
    rps_number: str = ""


@dataclass(frozen=True)
class ReferenceRoute:
    id: str
    name: str
    side: Optional[RouteSide]
    source: Optional[str]
    destination: Optional[str]
    middle_stops: Tuple[str, ...] = ()
    source_lat: Optional[float] = None
    source_lng: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None


@dataclass
class MergedShipment:
    """
    A raw record plus the reference route it matched (if any).

    Only the four ``route_*_lat/lng`` fields are written after creation, by
    the coordinate resolver. ``reference_*`` keep the matched route's own
    stored coordinates as one of the resolver's inputs.
    """
    record: RawShipmentRecord
    source_extracted: str
    destination_extracted: str
    match_key: str
    route_id: Optional[str] = None
    route_name: Optional[str] = None
    route_side: Optional[RouteSide] = None
    route_source: Optional[str] = None
    route_destination: Optional[str] = None
    route_middle_stops: Optional[List[str]] = None
    reference_source_lat: Optional[float] = None
    reference_source_lng: Optional[float] = None
    reference_destination_lat: Optional[float] = None
    reference_destination_lng: Optional[float] = None
    route_source_lat: Optional[float] = None
    route_source_lng: Optional[float] = None
    route_destination_lat: Optional[float] = None
    route_destination_lng: Optional[float] = None

    @property
    def is_matched(self) -> bool:
        return bool(self.route_id)


@dataclass(frozen=True)
class UnmatchedPair:
    consigner_name: str
    consignee_name: str
    source_extracted: str
    destination_extracted: str
    match_key: str

    @property
    def dedup_key(self) -> str:
        return f"{self.match_key}|{self.consigner_name}|{self.consignee_name}"


@dataclass(frozen=True)
class UnmatchedRouteInfo:
    route_name: str
    source: str
    destination: str
    middle_stops: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LocationReference:
    name: str
    latitude: Optional[float]
    longitude: Optional[float]


@dataclass
class VehicleEntry:
    vehicle_number: str
    rps_number: Optional[str]
    dispatch_date: str
    last_location_date: str
    last_location: str
    late_hours: float
    middle_stops: List[str]
    expected_arrival: str
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass
class SideBucket:
    total_vehicles: int = 0
    late_vehicles: int = 0
    vehicles: List[VehicleEntry] = field(default_factory=list)

    def add(self, entry: VehicleEntry) -> None:
        self.vehicles.append(entry)
        self.total_vehicles += 1
        if entry.late_hours > 0:
            self.late_vehicles += 1


@dataclass
class RouteAggregate:
    id: str
    source: str
    destination: str
    source_lat: Optional[float] = None
    source_lng: Optional[float] = None
    dest_lat: Optional[float] = None
    dest_lng: Optional[float] = None
    up: SideBucket = field(default_factory=SideBucket)
    down: SideBucket = field(default_factory=SideBucket)

    def bucket_for(self, side: Optional[RouteSide]) -> Optional[SideBucket]:
        if side == RouteSide.UP:
            return self.up
        if side == RouteSide.DOWN:
            return self.down
        return None

    @property
    def total_vehicles(self) -> int:
        return self.up.total_vehicles + self.down.total_vehicles
