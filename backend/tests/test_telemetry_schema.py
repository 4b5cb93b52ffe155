from routesync.schemas.telemetry import TelemetrySnapshot


def test_snapshot_from_telemetry_json():
    snapshot = TelemetrySnapshot.model_validate_json(
        """
        {
          "vehicles": [{"vehicleNumber": " UP32AB1234 ", "lat": 26.0, "lng": 80.0}],
          "cities": [{"itemName": "Lucknow", "latitude": 26.85, "longitude": 80.95}],
          "landmarks": [{"itemName": "Safexpress Ambala (AML-11)", "lat": 30.38, "lng": 76.78},
                        {"itemName": "No coords"}]
        }
        """
    )
    positions = snapshot.vehicle_positions()
    assert positions["UP32AB1234"] == (26.0, 80.0)

    maps = snapshot.location_maps()
    assert maps.find_by_name("LUCKNOW").latitude == 26.85
    assert maps.find_by_code("AML-11").longitude == 76.78
    assert maps.find_by_name("No coords") is None


def test_empty_snapshot():
    snapshot = TelemetrySnapshot()
    assert dict(snapshot.vehicle_positions()) == {}
    assert snapshot.location_maps().find_by_name("Lucknow") is None
