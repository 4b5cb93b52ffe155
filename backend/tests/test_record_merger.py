import logging

from routesync.services.record_merger import make_city_route_key, merge_with_routes
from routesync.services.records import RawShipmentRecord, ReferenceRoute, RouteSide
from routesync.services.route_index import RouteKeyIndex


def test_exact_key_match_carries_route_fields():
    route = ReferenceRoute(
        id="R9",
        name="KANPUR-2/DELHI",
        side=RouteSide.DOWN,
        source="KANPUR-2",
        destination="DELHI",
        middle_stops=("AGRA",),
        source_lat=26.4,
        source_lng=80.3,
    )
    record = RawShipmentRecord(consigner_name="Kanpur-2;Other", consignee_name="AGRA; delhi ")
    [merged] = merge_with_routes([record], RouteKeyIndex.build([route]))

    assert merged.is_matched
    assert merged.source_extracted == "Kanpur-2"
    assert merged.destination_extracted == "delhi"
    assert merged.match_key == "kanpur-2___delhi"
    assert merged.route_side == RouteSide.DOWN
    assert merged.route_middle_stops == ["AGRA"]
    assert merged.reference_source_lat == 26.4
    assert merged.route_source_lat is None


def test_city_level_key_fallback(lucknow_ambala_route, lucknow_shipment):
    [merged] = merge_with_routes([lucknow_shipment], RouteKeyIndex.build([lucknow_ambala_route]))
    assert merged.route_id == "R1"
    # match_key still reflects the raw endpoints
    assert merged.match_key == "lucknow-11___safexpressambala(aml11)"


def test_make_city_route_key():
    assert make_city_route_key("LUCKNOW-11", "SAFEXPRESS AMBALA(AML11)") == "lucknow___ambala(aml11)"
    assert make_city_route_key("LUCKNOW-11", "DELHI") == "lucknow___delhi"
    assert make_city_route_key("", "DELHI") is None


def test_unmatched_rows_keep_order_and_extracted_fields():
    records = [
        RawShipmentRecord(vehicle_number="V1", consigner_name="A", consignee_name="B"),
        RawShipmentRecord(vehicle_number="V2", consigner_name="C", consignee_name="D"),
    ]
    merged = merge_with_routes(records, RouteKeyIndex.build([]))
    assert [m.record.vehicle_number for m in merged] == ["V1", "V2"]
    assert not any(m.is_matched for m in merged)
    assert merged[1].match_key == "c___d"


def test_city_key_match_is_logged_at_info(caplog, lucknow_ambala_route, lucknow_shipment):
    with caplog.at_level(logging.INFO, logger="routesync.services.record_merger"):
        merge_with_routes([lucknow_shipment], RouteKeyIndex.build([lucknow_ambala_route]))
    city_matches = [r for r in caplog.records if "via city key" in r.getMessage()]
    assert len(city_matches) == 1
    assert city_matches[0].levelno == logging.INFO
    assert "R1" in city_matches[0].getMessage()
