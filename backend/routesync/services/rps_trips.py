"""
RPS report ingestion - closed trips into the Trip table.

Key rules:
1. Required columns: RPS number, vehicle number, dispatch date, closure date, route name
2. Rows missing any required value are skipped
3. Only trips dispatched within the cutoff window are kept
4. Vehicles are created on demand; duplicate trips are skipped
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Set, Tuple

import pandas as pd
from sqlalchemy.orm import Session

from routesync.config.mapping_loader import get_rps_header_aliases
from routesync.models import Trip, Vehicle, VehicleType
from routesync.services.file_parser import build_header_index, cell_text
from routesync.services.normalizer import normalize_header, parse_export_datetime

logger = logging.getLogger(__name__)

REQUIRED_LABELS = {
    "rps_no": "RPS Number",
    "vehicle_no": "Vehicle Number",
    "dispatch_date": "Dispatch Date",
    "closure_date": "Closure Date",
    "route_name": "Route Name",
}


@dataclass(frozen=True)
class RpsTripRow:
    rps_no: str
    vehicle_no: str
    dispatch_date: datetime
    closure_date: datetime
    route_name: str

    @property
    def unique_key(self) -> Tuple[str, datetime, str, str]:
        return (self.vehicle_no, self.dispatch_date, self.route_name, self.rps_no)


def clean_route_name(route: Any) -> str:
    """Route names are compared with all whitespace removed."""
    return re.sub(r"\s+", "", cell_text(route))


def _find_column(header_index: Dict[str, int], aliases: List[str]) -> Optional[int]:
    for alias in aliases:
        position = header_index.get(normalize_header(alias))
        if position is not None:
            return position
    return None


def parse_rps_export(df: pd.DataFrame) -> List[RpsTripRow]:
    """
    Parse a header-less RPS export frame.

    Raises:
        ValueError: when any required header is missing
    """
    if df.empty:
        return []

    rows = df.values.tolist()
    header_index = build_header_index(rows[0])
    aliases = get_rps_header_aliases()
    columns = {field_name: _find_column(header_index, aliases[field_name]) for field_name in REQUIRED_LABELS}

    missing = [REQUIRED_LABELS[f] for f, position in columns.items() if position is None]
    if missing:
        found = " | ".join(cell_text(h) for h in rows[0])
        raise ValueError(f"Excel headers missing/changed: {', '.join(missing)}. Found headers: {found}")

    parsed: List[RpsTripRow] = []
    skipped = 0
    for row in rows[1:]:
        def get(field_name: str):
            position = columns[field_name]
            return row[position] if position < len(row) else None

        rps_no = cell_text(get("rps_no"))
        vehicle_no = cell_text(get("vehicle_no"))
        route_name = clean_route_name(get("route_name"))
        dispatch_date = parse_export_datetime(get("dispatch_date"))
        closure_date = parse_export_datetime(get("closure_date"))

        if not rps_no or not vehicle_no or not route_name or not dispatch_date or not closure_date:
            skipped += 1
            continue

        parsed.append(
            RpsTripRow(
                rps_no=rps_no,
                vehicle_no=vehicle_no,
                dispatch_date=dispatch_date,
                closure_date=closure_date,
                route_name=route_name,
            )
        )

    logger.info("Parsed %d RPS rows (%d skipped for missing values)", len(parsed), skipped)
    return parsed


def filter_recent_trips(
    rows: List[RpsTripRow], cutoff_days: int, now: Optional[datetime] = None
) -> List[RpsTripRow]:
    """Trips dispatched within the last ``cutoff_days`` days, ordered by closure date."""
    now = now or datetime.now()
    cutoff = now - timedelta(days=cutoff_days)
    recent = [r for r in rows if r.dispatch_date >= cutoff]
    recent.sort(key=lambda r: r.closure_date)
    return recent


def ensure_vehicles_exist(db: Session, vehicle_numbers: List[str]) -> int:
    """Create missing Vehicle rows so trips always have a parent. Returns count created."""
    if not vehicle_numbers:
        return 0
    existing = {
        number
        for (number,) in db.query(Vehicle.vehicle_number)
        .filter(Vehicle.vehicle_number.in_(vehicle_numbers))
        .all()
    }
    created = 0
    for number in vehicle_numbers:
        if number in existing:
            continue
        db.add(Vehicle(vehicle_number=number, vehicle_type=VehicleType.OTHER))
        existing.add(number)
        created += 1
    db.commit()
    return created


def _existing_trip_keys(db: Session, batch: List[RpsTripRow]) -> Set[Tuple[str, datetime, str, str]]:
    vehicle_numbers = {r.vehicle_no for r in batch}
    rps_numbers = {r.rps_no for r in batch}
    rows = (
        db.query(Trip.vehicle_number, Trip.route_start_date_time, Trip.route_name, Trip.rps_no)
        .filter(Trip.vehicle_number.in_(vehicle_numbers), Trip.rps_no.in_(rps_numbers))
        .all()
    )
    return {(r[0], r[1], r[2], r[3]) for r in rows}


def ingest_rps_trips(db: Session, rows: List[RpsTripRow], batch_size: int) -> int:
    """
    Insert trips in batches, skipping ones already stored.

    Vehicles referenced by the rows are created first. Returns count inserted.
    """
    created = ensure_vehicles_exist(db, list(dict.fromkeys(r.vehicle_no for r in rows)))
    if created:
        logger.info("Created %d new vehicles", created)
    inserted = 0
    batch_size = max(1, batch_size)
    for start in range(0, len(rows), batch_size):
        batch = rows[start:start + batch_size]
        seen = _existing_trip_keys(db, batch)
        new_trips = []
        for row in batch:
            if row.unique_key in seen:
                continue
            seen.add(row.unique_key)
            new_trips.append(
                Trip(
                    vehicle_number=row.vehicle_no,
                    rps_no=row.rps_no,
                    route_name=row.route_name,
                    route_start_date_time=row.dispatch_date,
                    route_reaching_date_time=row.closure_date,
                )
            )
        db.add_all(new_trips)
        db.commit()
        inserted += len(new_trips)
        logger.info("Batch %d: inserted %d", start // batch_size + 1, len(new_trips))
    return inserted


def ingest_rps_export(
    db: Session,
    df: pd.DataFrame,
    cutoff_days: int,
    batch_size: int,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    parsed = parse_rps_export(df)
    recent = filter_recent_trips(parsed, cutoff_days, now)
    if not recent:
        logger.info("No rows after %d-day dispatch cutoff.", cutoff_days)
        return {"parsed": len(parsed), "recent": 0, "inserted": 0}

    inserted = ingest_rps_trips(db, recent, batch_size)

    logger.info("Done. Total newly inserted Trip rows = %d", inserted)
    return {
        "parsed": len(parsed),
        "recent": len(recent),
        "inserted": inserted,
    }
