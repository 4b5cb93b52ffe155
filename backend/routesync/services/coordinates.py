"""
Endpoint and vehicle coordinate resolution.

Stage 1 (per shipment): telemetry dropdown lookups first, then the matched
route's stored coordinates. Stage 2 (per route aggregate): fuzzy match
against the Location reference list for whatever is still missing.
Latitude and longitude always travel together.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from routesync.services.location_matcher import DEFAULT_MATCH_THRESHOLD, find_best_location_match
from routesync.services.normalizer import (
    extract_branch_code_from_consignee,
    extract_city_from_consignee,
    extract_city_from_consigner,
    extract_parenthetical_code,
    normalize_location_key,
)
from routesync.services.records import LocationReference, MergedShipment, RouteAggregate

logger = logging.getLogger(__name__)

LatLng = Tuple[Optional[float], Optional[float]]


def _pair(lat: Optional[float], lng: Optional[float]) -> Optional[Tuple[float, float]]:
    if lat is None or lng is None:
        return None
    return lat, lng


@dataclass(frozen=True)
class LocationMaps:
    """City / landmark lookups from the telemetry Map View dropdowns."""
    city_by_name: Mapping[str, LocationReference] = field(default_factory=dict)
    landmark_by_code: Mapping[str, LocationReference] = field(default_factory=dict)
    landmark_by_name: Mapping[str, LocationReference] = field(default_factory=dict)

    @classmethod
    def from_dropdowns(
        cls,
        cities: Iterable[LocationReference],
        landmarks: Iterable[LocationReference],
    ) -> "LocationMaps":
        city_by_name: Dict[str, LocationReference] = {}
        landmark_by_code: Dict[str, LocationReference] = {}
        landmark_by_name: Dict[str, LocationReference] = {}

        # First entry per key wins
        for city in cities:
            if _pair(city.latitude, city.longitude) is None:
                continue
            city_by_name.setdefault(normalize_location_key(city.name), city)

        for landmark in landmarks:
            if _pair(landmark.latitude, landmark.longitude) is None:
                continue
            landmark_by_name.setdefault(normalize_location_key(landmark.name), landmark)
            code = extract_parenthetical_code(landmark.name)
            if code:
                landmark_by_code.setdefault(normalize_location_key(code), landmark)

        logger.info(
            "Location maps built: cities=%d, landmarksByCode=%d, landmarksByName=%d",
            len(city_by_name),
            len(landmark_by_code),
            len(landmark_by_name),
        )
        return cls(
            city_by_name=MappingProxyType(city_by_name),
            landmark_by_code=MappingProxyType(landmark_by_code),
            landmark_by_name=MappingProxyType(landmark_by_name),
        )

    def find_by_name(self, raw_name: str) -> Optional[LocationReference]:
        """City list first, landmark-by-name second."""
        if not raw_name:
            return None
        key = normalize_location_key(raw_name)
        return self.city_by_name.get(key) or self.landmark_by_name.get(key)

    def find_by_code(self, code: str) -> Optional[LocationReference]:
        if not code:
            return None
        return self.landmark_by_code.get(normalize_location_key(code))


def _coords_of(entry: Optional[LocationReference]) -> Optional[Tuple[float, float]]:
    if entry is None:
        return None
    return _pair(entry.latitude, entry.longitude)


def telemetry_source_coords(maps: LocationMaps, consigner_name: str) -> Optional[Tuple[float, float]]:
    return _coords_of(maps.find_by_name(extract_city_from_consigner(consigner_name)))


def telemetry_destination_coords(maps: LocationMaps, consignee_name: str) -> Optional[Tuple[float, float]]:
    by_code = _coords_of(maps.find_by_code(extract_branch_code_from_consignee(consignee_name)))
    if by_code is not None:
        return by_code
    return _coords_of(maps.find_by_name(extract_city_from_consignee(consignee_name)))


def resolve_shipment_coordinates(
    merged: Sequence[MergedShipment], maps: LocationMaps
) -> Sequence[MergedShipment]:
    """
    Fill the four endpoint coordinate fields of each merged shipment in place.

    final = telemetry dropdown value if found, else the route's stored value,
    else None.
    """
    from_telemetry = 0
    for row in merged:
        source = telemetry_source_coords(maps, row.record.consigner_name)
        if source is None:
            source = _pair(row.reference_source_lat, row.reference_source_lng)
        else:
            from_telemetry += 1

        destination = telemetry_destination_coords(maps, row.record.consignee_name)
        if destination is None:
            destination = _pair(row.reference_destination_lat, row.reference_destination_lng)
        else:
            from_telemetry += 1

        row.route_source_lat, row.route_source_lng = source or (None, None)
        row.route_destination_lat, row.route_destination_lng = destination or (None, None)

    logger.info(
        "Resolved shipment coordinates for %d rows (%d endpoints from telemetry)",
        len(merged),
        from_telemetry,
    )
    return merged


def resolve_aggregate_coordinates(
    aggregates: Sequence[RouteAggregate],
    locations: Sequence[LocationReference],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> Sequence[RouteAggregate]:
    """Fuzzy-match still-missing route endpoints against the Location list, in place."""
    if not aggregates:
        logger.info("No live routes to enrich from Location table.")
        return aggregates
    if not locations:
        logger.info("No Location rows available for enrichment.")
        return aggregates

    for route in aggregates:
        if route.source and (route.source_lat is None or route.source_lng is None):
            match = find_best_location_match(route.source, locations, threshold)
            coords = _coords_of(match)
            if coords is not None:
                route.source_lat, route.source_lng = coords
            else:
                logger.warning("No Location match for source %r of route %s", route.source, route.id)

        if route.destination and (route.dest_lat is None or route.dest_lng is None):
            match = find_best_location_match(route.destination, locations, threshold)
            coords = _coords_of(match)
            if coords is not None:
                route.dest_lat, route.dest_lng = coords
            else:
                logger.warning("No Location match for destination %r of route %s", route.destination, route.id)

    logger.info("Location enrichment with fuzzy matching completed for %d routes.", len(aggregates))
    return aggregates


@dataclass(frozen=True)
class VehiclePosition:
    vehicle_number: str
    lat: Optional[float]
    lng: Optional[float]


def build_vehicle_positions(positions: Iterable[VehiclePosition]) -> Mapping[str, LatLng]:
    """Vehicle number (trimmed) -> (lat, lng). Later entries replace earlier ones."""
    by_vehicle: Dict[str, LatLng] = {}
    for position in positions:
        by_vehicle[str(position.vehicle_number or "").strip()] = (position.lat, position.lng)
    return MappingProxyType(by_vehicle)


def lookup_vehicle_position(positions: Mapping[str, LatLng], vehicle_number: Optional[str]) -> LatLng:
    """Exact trimmed match on vehicle number; (None, None) on a miss."""
    return positions.get(str(vehicle_number or "").strip(), (None, None))


def empty_location_maps() -> LocationMaps:
    return LocationMaps.from_dropdowns([], [])
