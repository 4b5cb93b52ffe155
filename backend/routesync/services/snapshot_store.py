"""
Persistence for the live route pipeline: reference loading and snapshot writes.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from routesync.models import LiveRoute, LiveVehicle, Location, Route, UnmatchedTripSide
from routesync.services.normalizer import parse_export_datetime
from routesync.services.records import (
    LocationReference,
    ReferenceRoute,
    RouteAggregate,
    RouteSide,
    SideBucket,
    UnmatchedRouteInfo,
)

logger = logging.getLogger(__name__)


def load_reference_routes(db: Session) -> List[ReferenceRoute]:
    routes = db.query(Route).order_by(Route.created_at, Route.id).all()
    return [
        ReferenceRoute(
            id=str(route.id),
            name=route.route_name,
            side=RouteSide.parse(route.route_side),
            source=route.source,
            destination=route.destination,
            middle_stops=tuple(route.middle_stops or ()),
            source_lat=route.source_lat,
            source_lng=route.source_lng,
            destination_lat=route.destination_lat,
            destination_lng=route.destination_lng,
        )
        for route in routes
    ]


def load_locations(db: Session) -> List[LocationReference]:
    locations = db.query(Location).order_by(Location.id).all()
    return [
        LocationReference(name=loc.name, latitude=loc.latitude, longitude=loc.longitude)
        for loc in locations
    ]


def safe_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an export timestamp for storage; None when empty or invalid."""
    if not value:
        return None
    parsed = parse_export_datetime(value)
    if parsed is None:
        logger.warning("Invalid date string encountered: %r -> storing null", value)
    return parsed


def _vehicle_rows(route: RouteAggregate, side: RouteSide, bucket: SideBucket) -> List[LiveVehicle]:
    rows = []
    for position, vehicle in enumerate(bucket.vehicles):
        rows.append(
            LiveVehicle(
                id=str(uuid.uuid4()),
                route_id=route.id,
                direction=side,
                position=position,
                vehicle_number=vehicle.vehicle_number or None,
                rps_number=vehicle.rps_number,
                dispatch_date=safe_date(vehicle.dispatch_date),
                last_location_date=safe_date(vehicle.last_location_date),
                last_location=vehicle.last_location or None,
                lat=vehicle.lat,
                lng=vehicle.lng,
                expected_arrival=safe_date(vehicle.expected_arrival),
                late_hours=vehicle.late_hours,
                middle_stops=list(vehicle.middle_stops or []),
            )
        )
    return rows


def save_live_route_snapshot(
    db: Session,
    aggregates: Sequence[RouteAggregate],
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Replace the whole live route snapshot in one transaction.

    Existing vehicles and routes are deleted (children first) and the new
    aggregates inserted. Any failure rolls the transaction back.
    """
    now = now or datetime.utcnow()

    route_rows = [
        LiveRoute(
            id=route.id,
            source=route.source,
            destination=route.destination,
            source_lat=route.source_lat,
            source_lng=route.source_lng,
            dest_lat=route.dest_lat,
            dest_lng=route.dest_lng,
            updated_at=now,
        )
        for route in aggregates
    ]

    vehicle_rows: List[LiveVehicle] = []
    for route in aggregates:
        vehicle_rows.extend(_vehicle_rows(route, RouteSide.UP, route.up))
        vehicle_rows.extend(_vehicle_rows(route, RouteSide.DOWN, route.down))

    logger.info(
        "Prepared %d LiveRoute rows and %d LiveVehicle rows.",
        len(route_rows),
        len(vehicle_rows),
    )

    try:
        db.query(LiveVehicle).delete()
        db.query(LiveRoute).delete()
        db.add_all(route_rows)
        db.flush()
        db.add_all(vehicle_rows)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Live route snapshot saved to database (transaction committed).")
    return {"routes": len(route_rows), "vehicles": len(vehicle_rows)}


def save_unmatched_routes(db: Session, infos: Iterable[UnmatchedRouteInfo]) -> int:
    """
    Store unmatched route patterns, skipping route names already stored.

    Returns the number of rows inserted. A database error is logged and
    rolled back so the live snapshot can still be written.
    """
    infos = list(infos)
    if not infos:
        logger.info("No unmatched route pairs to store.")
        return 0

    names = {info.route_name for info in infos}
    existing = {
        name
        for (name,) in db.query(UnmatchedTripSide.route_name)
        .filter(UnmatchedTripSide.route_name.in_(names))
        .all()
    }

    new_rows: List[UnmatchedTripSide] = []
    for info in infos:
        if info.route_name in existing:
            continue
        existing.add(info.route_name)
        new_rows.append(
            UnmatchedTripSide(
                route_name=info.route_name,
                source=info.source,
                destination=info.destination,
                trip_side=None,
            )
        )

    if not new_rows:
        logger.info("No new unmatched route patterns (all %d already stored).", len(infos))
        return 0

    try:
        db.add_all(new_rows)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error inserting unmatched route patterns")
        return 0

    logger.info(
        "Inserted %d new unmatched route patterns (%d duplicates skipped).",
        len(new_rows),
        len(infos) - len(new_rows),
    )
    return len(new_rows)


def _vehicle_to_dict(vehicle: LiveVehicle) -> Dict[str, Any]:
    return {
        "vehicle_number": vehicle.vehicle_number,
        "rps_number": vehicle.rps_number,
        "dispatch_date": vehicle.dispatch_date,
        "last_location_date": vehicle.last_location_date,
        "last_location": vehicle.last_location,
        "late_hours": vehicle.late_hours,
        "middle_stops": vehicle.middle_stops or [],
        "expected_arrival": vehicle.expected_arrival,
        "lat": vehicle.lat,
        "lng": vehicle.lng,
    }


def _bucket_to_dict(vehicles: List[LiveVehicle]) -> Dict[str, Any]:
    ordered = sorted(vehicles, key=lambda v: v.position or 0)
    return {
        "total_vehicles": len(ordered),
        "late_vehicles": sum(1 for v in ordered if (v.late_hours or 0) > 0),
        "vehicles": [_vehicle_to_dict(v) for v in ordered],
    }


def live_route_to_dict(route: LiveRoute) -> Dict[str, Any]:
    up = [v for v in route.vehicles if RouteSide.parse(v.direction) == RouteSide.UP]
    down = [v for v in route.vehicles if RouteSide.parse(v.direction) == RouteSide.DOWN]
    return {
        "id": route.id,
        "source": route.source,
        "destination": route.destination,
        "source_lat": route.source_lat,
        "source_lng": route.source_lng,
        "dest_lat": route.dest_lat,
        "dest_lng": route.dest_lng,
        "updated_at": route.updated_at,
        "up": _bucket_to_dict(up),
        "down": _bucket_to_dict(down),
    }


def list_live_routes(db: Session) -> List[Dict[str, Any]]:
    routes = db.query(LiveRoute).order_by(LiveRoute.source, LiveRoute.destination).all()
    return [live_route_to_dict(route) for route in routes]


def get_live_route(db: Session, route_id: str) -> Optional[Dict[str, Any]]:
    route = db.query(LiveRoute).filter(LiveRoute.id == route_id).first()
    if not route:
        return None
    return live_route_to_dict(route)
