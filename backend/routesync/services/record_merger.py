"""
Attach a reference route (or none) to each raw shipment record.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from routesync.services.normalizer import (
    extract_branch_code_from_consignee,
    extract_city_from_consignee,
    extract_city_from_consigner,
    extract_destination_from_consignee,
    extract_source_from_consigner,
)
from routesync.services.records import MergedShipment, RawShipmentRecord, ReferenceRoute
from routesync.services.route_index import RouteKeyIndex, make_route_key

logger = logging.getLogger(__name__)


def make_city_route_key(consigner_name: str, consignee_name: str) -> Optional[str]:
    """
    Secondary key from the city-level parts of the endpoints.

    "LUCKNOW-11" / "SAFEXPRESS AMBALA(AML11)" -> key of ("LUCKNOW", "AMBALA(AML11)").
    Returns None when either city is missing.
    """
    source_city = extract_city_from_consigner(consigner_name)
    dest_city = extract_city_from_consignee(consignee_name)
    if not source_city or not dest_city:
        return None
    branch_code = extract_branch_code_from_consignee(consignee_name)
    destination = f"{dest_city}({branch_code})" if branch_code else dest_city
    return make_route_key(source_city, destination)


def match_route(
    record: RawShipmentRecord, index: RouteKeyIndex
) -> Tuple[str, str, str, Optional[ReferenceRoute]]:
    """
    Returns (source_extracted, destination_extracted, match_key, route).

    ``match_key`` is always the key of the raw extracted endpoints, even when
    the route was found through the city-level key.
    """
    source = extract_source_from_consigner(record.consigner_name)
    destination = extract_destination_from_consignee(record.consignee_name)
    key = make_route_key(source, destination)

    route = index.lookup(key)
    if route is None:
        city_key = make_city_route_key(record.consigner_name, record.consignee_name)
        if city_key and city_key != key:
            route = index.lookup(city_key)
            if route is not None:
                logger.info("Matched %s via city key %s (route %s)", key, city_key, route.id)

    return source, destination, key, route


def merge_record(record: RawShipmentRecord, index: RouteKeyIndex) -> MergedShipment:
    source, destination, key, route = match_route(record, index)

    if route is None:
        logger.warning(
            'No route match for consigner="%s" -> consignee="%s" (key=%s)',
            source,
            destination,
            key,
        )
        return MergedShipment(
            record=record,
            source_extracted=source,
            destination_extracted=destination,
            match_key=key,
        )

    return MergedShipment(
        record=record,
        source_extracted=source,
        destination_extracted=destination,
        match_key=key,
        route_id=route.id,
        route_name=route.name,
        route_side=route.side,
        route_source=route.source,
        route_destination=route.destination,
        route_middle_stops=list(route.middle_stops) if route.middle_stops is not None else None,
        reference_source_lat=route.source_lat,
        reference_source_lng=route.source_lng,
        reference_destination_lat=route.destination_lat,
        reference_destination_lng=route.destination_lng,
    )


def merge_with_routes(
    records: Iterable[RawShipmentRecord], index: RouteKeyIndex
) -> List[MergedShipment]:
    """Merge parsed export rows with the route reference, preserving input order."""
    merged = [merge_record(record, index) for record in records]
    matched = sum(1 for row in merged if row.is_matched)
    logger.info("Merged %d records: %d matched, %d unmatched", len(merged), matched, len(merged) - matched)
    return merged
