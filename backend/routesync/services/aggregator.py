"""
Group merged shipments into per-route Up / Down vehicle buckets.
"""
import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional

from routesync.services.coordinates import LatLng, lookup_vehicle_position
from routesync.services.records import MergedShipment, RouteAggregate, RouteSide, VehicleEntry

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "NA"
_DELAY_PART_RE = re.compile(r"^-?[0-9]+$")


def parse_delay_to_hours(delay: Optional[str]) -> float:
    """
    "HH:MM:SS" delay -> hours as a float ("02:30:00" -> 2.5).

    Missing minute/second parts count as 0. Empty, malformed or non-numeric
    input yields 0.
    """
    if not delay:
        return 0.0
    parts = str(delay).split(":")
    if len(parts) < 2:
        return 0.0
    parts = [p.strip() for p in parts]
    if not all(_DELAY_PART_RE.match(p) for p in parts):
        return 0.0
    numbers = [int(p) for p in parts]
    hh, mm = numbers[0], numbers[1]
    ss = numbers[2] if len(numbers) > 2 else 0
    return hh + mm / 60 + ss / 3600


def pick_eta_for_destination(eta: Optional[str]) -> str:
    """
    ETA at the final destination.

    The export lists one ETA per stop separated by ";" with "NA" for stops
    already passed; the last remaining value is the destination's.
    """
    if not eta:
        return ""
    parts = [p.strip() for p in str(eta).split(";")]
    parts = [p for p in parts if p and p.upper() != NOT_AVAILABLE]
    return parts[-1] if parts else ""


def build_vehicle_entry(row: MergedShipment, positions: Mapping[str, LatLng]) -> VehicleEntry:
    record = row.record
    lat, lng = lookup_vehicle_position(positions, record.vehicle_number)
    return VehicleEntry(
        vehicle_number=record.vehicle_number,
        rps_number=record.rps_number or None,
        dispatch_date=record.dispatch_date,
        last_location_date=record.last_location_date,
        last_location=record.last_location,
        late_hours=parse_delay_to_hours(record.delay_time),
        middle_stops=list(row.route_middle_stops or []),
        expected_arrival=pick_eta_for_destination(record.eta),
        lat=lat,
        lng=lng,
    )


def aggregate_live_routes(
    merged: Iterable[MergedShipment],
    vehicle_positions: Optional[Mapping[str, LatLng]] = None,
) -> List[RouteAggregate]:
    """
    Aggregate merged rows into one RouteAggregate per matched route id.

    Unmatched rows are left to the unmatched collector. Rows whose route
    declares neither Up nor Down are logged and left out of both buckets.
    Aggregates come out in first-encounter order and vehicles in input order.
    """
    positions = vehicle_positions or {}
    routes: Dict[str, RouteAggregate] = {}
    sideless = 0

    for row in merged:
        if not row.route_id or not row.route_source or not row.route_destination:
            continue

        side = RouteSide.parse(row.route_side)
        if side is None:
            sideless += 1
            logger.warning(
                "Row has no valid route side (neither Up nor Down), skipping from side buckets: "
                "route_id=%s route_name=%s source=%s destination=%s side=%s vehicle=%s",
                row.route_id,
                row.route_name,
                row.route_source,
                row.route_destination,
                row.route_side,
                row.record.vehicle_number,
            )
            continue

        aggregate = routes.get(row.route_id)
        if aggregate is None:
            aggregate = RouteAggregate(
                id=row.route_id,
                source=row.route_source,
                destination=row.route_destination,
            )
            routes[row.route_id] = aggregate

        aggregate.bucket_for(side).add(build_vehicle_entry(row, positions))

        # Route-level coords come from the first row that has them
        if aggregate.source_lat is None and row.route_source_lat is not None:
            aggregate.source_lat = row.route_source_lat
            aggregate.source_lng = row.route_source_lng
        if aggregate.dest_lat is None and row.route_destination_lat is not None:
            aggregate.dest_lat = row.route_destination_lat
            aggregate.dest_lng = row.route_destination_lng

    logger.info(
        "Aggregated %d live routes (%d rows without a route side)",
        len(routes),
        sideless,
    )
    return list(routes.values())
