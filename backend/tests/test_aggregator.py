import pytest

from routesync.services.aggregator import (
    aggregate_live_routes,
    parse_delay_to_hours,
    pick_eta_for_destination,
)
from routesync.services.records import MergedShipment, RawShipmentRecord, RouteSide


def _row(vehicle, route_id="R1", side=RouteSide.UP, delay="", **coords):
    return MergedShipment(
        record=RawShipmentRecord(vehicle_number=vehicle, delay_time=delay, eta="NA;10/06/2024 10:00:00"),
        source_extracted="S",
        destination_extracted="D",
        match_key="s___d",
        route_id=route_id,
        route_name=f"{route_id}-name",
        route_side=side,
        route_source="S",
        route_destination="D",
        route_middle_stops=["M"],
        **coords,
    )


@pytest.mark.parametrize(
    "delay,expected",
    [
        ("02:30:00", 2.5),
        ("01:15:00", 1.25),
        ("00:00:36", 0.01),
        ("3:30", 3.5),
        ("", 0.0),
        (None, 0.0),
        ("garbage", 0.0),
        ("aa:bb:cc", 0.0),
        ("1_0:00:00", 0.0),
        ("\u0661:00:00", 0.0),
    ],
)
def test_parse_delay_to_hours(delay, expected):
    assert parse_delay_to_hours(delay) == pytest.approx(expected)


def test_pick_eta_for_destination():
    assert pick_eta_for_destination("10/05/2024 10:00:00;NA;12/05/2024 08:00:00") == "12/05/2024 08:00:00"
    assert pick_eta_for_destination("NA;na") == ""
    assert pick_eta_for_destination(" 10/05/2024 10:00:00 ;NA") == "10/05/2024 10:00:00"
    assert pick_eta_for_destination("") == ""


def test_groups_by_route_and_side_in_input_order():
    rows = [
        _row("V1", delay="01:00:00"),
        _row("V2", route_id="R2", side=RouteSide.DOWN),
        _row("V3", side=RouteSide.DOWN),
        _row("V4"),
    ]
    routes = aggregate_live_routes(rows)
    assert [r.id for r in routes] == ["R1", "R2"]

    r1 = routes[0]
    assert [v.vehicle_number for v in r1.up.vehicles] == ["V1", "V4"]
    assert [v.vehicle_number for v in r1.down.vehicles] == ["V3"]
    assert (r1.up.total_vehicles, r1.up.late_vehicles) == (2, 1)
    assert r1.up.vehicles[0].middle_stops == ["M"]
    assert r1.up.vehicles[0].expected_arrival == "10/06/2024 10:00:00"


def test_sideless_and_unmatched_rows_are_excluded():
    rows = [_row("V1", side=None), _row("V2", route_id=None)]
    assert aggregate_live_routes(rows) == []


def test_sideless_row_next_to_sided_row_does_not_count():
    routes = aggregate_live_routes([_row("V1"), _row("V2", side=None)])
    assert routes[0].total_vehicles == 1


def test_late_never_exceeds_total():
    rows = [_row(f"V{i}", side=RouteSide.UP if i % 2 else RouteSide.DOWN, delay=d)
            for i, d in enumerate(["01:00:00", "", "garbage", "00:00:01", "-1:00:00"])]
    for route in aggregate_live_routes(rows):
        for bucket in (route.up, route.down):
            assert bucket.late_vehicles <= bucket.total_vehicles


def test_route_coordinates_backfilled_from_first_row_with_values():
    rows = [
        _row("V1"),
        _row("V2", route_source_lat=1.0, route_source_lng=2.0),
        _row("V3", route_source_lat=5.0, route_source_lng=6.0, route_destination_lat=3.0, route_destination_lng=4.0),
    ]
    [route] = aggregate_live_routes(rows)
    assert (route.source_lat, route.source_lng) == (1.0, 2.0)
    assert (route.dest_lat, route.dest_lng) == (3.0, 4.0)


def test_vehicle_positions_attached():
    [route] = aggregate_live_routes([_row("V1")], {"V1": (26.0, 80.0)})
    assert (route.up.vehicles[0].lat, route.up.vehicles[0].lng) == (26.0, 80.0)
