from datetime import datetime

import pandas as pd
import pytest

from routesync.models import Trip, Vehicle, VehicleType
from routesync.services.rps_trips import (
    RpsTripRow,
    clean_route_name,
    filter_recent_trips,
    ingest_rps_export,
    ingest_rps_trips,
    parse_rps_export,
)

NOW = datetime(2024, 6, 20, 12, 0, 0)


def _frame(*rows):
    return pd.DataFrame([["RPS No", "Vehicle  Number", "Dispatch Date", "Closure Date", "Route Name"], *rows])


def test_parse_rps_export_skips_incomplete_rows():
    df = _frame(
        ["RPS-1", "UP32AB1234", "2024-06-15 09:00:00", "2024-06-16 10:00:00", "LUCKNOW - AMBALA"],
        ["RPS-2", None, "2024-06-15 09:00:00", "2024-06-16 10:00:00", "X"],
        ["RPS-3", "V3", "bad date", "2024-06-16 10:00:00", "X"],
    )
    [row] = parse_rps_export(df)
    assert row.rps_no == "RPS-1"
    assert row.route_name == "LUCKNOW-AMBALA"
    assert row.dispatch_date == datetime(2024, 6, 15, 9, 0, 0)


def test_parse_rps_export_missing_headers():
    df = pd.DataFrame([["RPS No", "Vehicle Number"], ["RPS-1", "V1"]])
    with pytest.raises(ValueError) as exc:
        parse_rps_export(df)
    assert "Dispatch Date" in str(exc.value)
    assert "Route Name" in str(exc.value)


def test_clean_route_name():
    assert clean_route_name(" A /  B\tC ") == "A/BC"
    assert clean_route_name(None) == ""


def _trip(rps, vehicle, dispatch, closure, route="R"):
    return RpsTripRow(rps_no=rps, vehicle_no=vehicle, dispatch_date=dispatch, closure_date=closure, route_name=route)


def test_filter_recent_trips_orders_by_closure():
    rows = [
        _trip("1", "V1", datetime(2024, 6, 18), datetime(2024, 6, 19)),
        _trip("2", "V1", datetime(2024, 6, 1), datetime(2024, 6, 2)),
        _trip("3", "V2", datetime(2024, 6, 10), datetime(2024, 6, 11)),
    ]
    recent = filter_recent_trips(rows, cutoff_days=12, now=NOW)
    assert [r.rps_no for r in recent] == ["3", "1"]


def test_ingest_rps_trips_creates_vehicles_and_skips_duplicates(db):
    rows = [
        _trip("1", "V1", datetime(2024, 6, 18), datetime(2024, 6, 19)),
        _trip("2", "V2", datetime(2024, 6, 17), datetime(2024, 6, 19)),
        _trip("1", "V1", datetime(2024, 6, 18), datetime(2024, 6, 19)),
    ]
    assert ingest_rps_trips(db, rows, batch_size=2) == 2
    assert ingest_rps_trips(db, rows, batch_size=500) == 0

    assert db.query(Trip).count() == 2
    vehicles = db.query(Vehicle).order_by(Vehicle.vehicle_number).all()
    assert [v.vehicle_number for v in vehicles] == ["V1", "V2"]
    assert all(v.vehicle_type == VehicleType.OTHER for v in vehicles)


def test_ingest_rps_export_summary(db):
    df = _frame(
        ["RPS-1", "V1", "2024-06-15 09:00:00", "2024-06-16 10:00:00", "A-B"],
        ["RPS-2", "V2", "2024-05-01 09:00:00", "2024-05-02 10:00:00", "A-B"],
    )
    summary = ingest_rps_export(db, df, cutoff_days=12, batch_size=500, now=NOW)
    assert summary == {"parsed": 2, "recent": 1, "inserted": 1}


def test_parse_rps_export_sub_second_excel_dates_keep_month():
    # read_export(dtype=str) renders xlsx datetimes with microseconds like this
    df = _frame(["RPS-1", "V1", "2024-06-05 09:00:00.500000", "2024-06-06 10:00:00", "A-B"])
    [row] = parse_rps_export(df)
    assert row.dispatch_date == datetime(2024, 6, 5, 9, 0, 0, 500000)
    assert filter_recent_trips([row], cutoff_days=12, now=datetime(2024, 6, 10)) == [row]
