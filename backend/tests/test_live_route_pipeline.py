from routesync.services.coordinates import LocationMaps, build_vehicle_positions, VehiclePosition
from routesync.services.live_route_pipeline import run_live_route_pipeline
from routesync.services.records import LocationReference, RawShipmentRecord, ReferenceRoute, RouteSide


def test_end_to_end_single_shipment(lucknow_ambala_route, lucknow_shipment):
    result = run_live_route_pipeline([lucknow_shipment], [lucknow_ambala_route], [])

    assert len(result.routes) == 1
    route = result.routes[0]
    assert route.id == "R1"
    assert (route.up.total_vehicles, route.up.late_vehicles) == (1, 1)
    assert route.down.total_vehicles == 0

    vehicle = route.up.vehicles[0]
    assert vehicle.late_hours == 1.25
    assert vehicle.expected_arrival == "15/06/2024 09:00:00"
    assert result.unmatched == []
    assert result.vehicle_count == 1
    assert "total" in result.timings


def test_coordinates_and_unmatched_flow(lucknow_ambala_route, lucknow_shipment):
    stray = RawShipmentRecord(vehicle_number="V9", consigner_name="KANPUR-2", consignee_name="DELHI")
    maps = LocationMaps.from_dropdowns([LocationReference("Lucknow", 26.85, 80.95)], [])
    positions = build_vehicle_positions([VehiclePosition("UP32AB1234", 30.0, 76.0)])
    locations = [LocationReference("Ambala Cantt (AML11)", 30.33, 76.85)]

    result = run_live_route_pipeline(
        [lucknow_shipment, stray, stray],
        [lucknow_ambala_route],
        locations,
        location_maps=maps,
        vehicle_positions=positions,
    )

    [route] = result.routes
    # source from telemetry, destination from the Location fallback
    assert (route.source_lat, route.source_lng) == (26.85, 80.95)
    assert (route.dest_lat, route.dest_lng) == (30.33, 76.85)
    assert (route.up.vehicles[0].lat, route.up.vehicles[0].lng) == (30.0, 76.0)

    assert len(result.unmatched) == 1
    assert [info.route_name for info in result.unmatched_routes] == ["KANPUR-2/DELHI"]


def test_pipeline_is_deterministic(lucknow_ambala_route, lucknow_shipment):
    first = run_live_route_pipeline([lucknow_shipment], [lucknow_ambala_route], [])
    second = run_live_route_pipeline([lucknow_shipment], [lucknow_ambala_route], [])
    assert first.routes == second.routes
    assert first.merged == second.merged


def test_reference_key_conflicts_surface_in_result(lucknow_ambala_route, lucknow_shipment):
    duplicate = ReferenceRoute(id="R2", name="lucknow/ambala(aml11)", side=RouteSide.DOWN,
                               source="lucknow", destination="Ambala(AML11)")
    result = run_live_route_pipeline([lucknow_shipment], [lucknow_ambala_route, duplicate], [])

    assert [(c.kept_id, c.replaced_id) for c in result.conflicts] == [("R2", "R1")]
    [route] = result.routes
    assert route.id == "R2"
    assert route.down.total_vehicles == 1
