"""
Collect shipments that found no reference route, for later curation.
"""
import logging
from typing import Iterable, List, Optional, Set

from routesync.services.normalizer import (
    extract_destination_from_consignee,
    extract_source_from_consigner,
)
from routesync.services.records import MergedShipment, UnmatchedPair, UnmatchedRouteInfo

logger = logging.getLogger(__name__)


def collect_unmatched(merged: Iterable[MergedShipment]) -> List[UnmatchedPair]:
    """Unique unmatched (match_key, consigner, consignee) pairs, first occurrence wins."""
    seen: Set[str] = set()
    result: List[UnmatchedPair] = []

    for row in merged:
        if row.is_matched:
            continue

        pair = UnmatchedPair(
            consigner_name=row.record.consigner_name,
            consignee_name=row.record.consignee_name,
            source_extracted=row.source_extracted,
            destination_extracted=row.destination_extracted,
            match_key=row.match_key,
        )
        if pair.dedup_key in seen:
            continue
        seen.add(pair.dedup_key)
        result.append(pair)

    return result


def build_unmatched_route_info(pair: UnmatchedPair) -> Optional[UnmatchedRouteInfo]:
    """
    Shape an unmatched pair like a reference route.

    Source / destination prefer the extracted values, then re-derive them
    from the raw names, then fall back to the raw names themselves. Every
    consignee segment but the last becomes a middle stop, and the route name
    is ``source/stop1/.../destination``.

    Returns None when source or destination is empty.
    """
    source_raw = (
        pair.source_extracted
        or extract_source_from_consigner(pair.consigner_name)
        or pair.consigner_name
    )
    destination_raw = (
        pair.destination_extracted
        or extract_destination_from_consignee(pair.consignee_name)
        or pair.consignee_name
    )

    source = str(source_raw or "").strip()
    destination = str(destination_raw or "").strip()
    if not source or not destination:
        return None

    consignee_parts = [p.strip() for p in str(pair.consignee_name or "").split(";")]
    consignee_parts = [p for p in consignee_parts if p]
    middle_stops = consignee_parts[:-1] if len(consignee_parts) > 1 else []

    route_name = "/".join([source, *middle_stops, destination])
    return UnmatchedRouteInfo(
        route_name=route_name,
        source=source,
        destination=destination,
        middle_stops=tuple(middle_stops),
    )


def build_unmatched_routes(pairs: Iterable[UnmatchedPair]) -> List[UnmatchedRouteInfo]:
    infos: List[UnmatchedRouteInfo] = []
    dropped = 0
    for pair in pairs:
        info = build_unmatched_route_info(pair)
        if info is None:
            dropped += 1
            continue
        infos.append(info)
    if dropped:
        logger.warning("Dropped %d unmatched pairs with no usable source/destination", dropped)
    return infos
