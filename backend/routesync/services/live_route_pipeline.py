"""
In-memory live route pipeline: merge -> resolve -> aggregate -> enrich.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from routesync.services.aggregator import aggregate_live_routes
from routesync.services.coordinates import (
    LatLng,
    LocationMaps,
    empty_location_maps,
    resolve_aggregate_coordinates,
    resolve_shipment_coordinates,
)
from routesync.services.location_matcher import DEFAULT_MATCH_THRESHOLD
from routesync.services.record_merger import merge_with_routes
from routesync.services.records import (
    LocationReference,
    MergedShipment,
    RawShipmentRecord,
    ReferenceRoute,
    RouteAggregate,
    UnmatchedPair,
    UnmatchedRouteInfo,
)
from routesync.services.route_index import RouteKeyConflict, RouteKeyIndex
from routesync.services.unmatched import build_unmatched_routes, collect_unmatched

logger = logging.getLogger(__name__)


@dataclass
class LiveRoutePipelineResult:
    routes: List[RouteAggregate]
    merged: List[MergedShipment]
    unmatched: List[UnmatchedPair]
    unmatched_routes: List[UnmatchedRouteInfo]
    conflicts: List[RouteKeyConflict] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def vehicle_count(self) -> int:
        return sum(route.total_vehicles for route in self.routes)


def run_live_route_pipeline(
    records: Sequence[RawShipmentRecord],
    reference_routes: Iterable[ReferenceRoute],
    locations: Sequence[LocationReference],
    location_maps: Optional[LocationMaps] = None,
    vehicle_positions: Optional[Mapping[str, LatLng]] = None,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> LiveRoutePipelineResult:
    """
    Run the full record-linkage and aggregation transform.

    Args:
        records: parsed export rows, in export order
        reference_routes: curated route reference
        locations: Location reference list (stage 2 fuzzy fallback)
        location_maps: telemetry city / landmark lookups (stage 1); empty if None
        vehicle_positions: live vehicle number -> (lat, lng)
        threshold: minimum fuzzy score for the Location fallback

    Returns:
        LiveRoutePipelineResult with aggregates, unmatched pairs and timings
    """
    timings: Dict[str, float] = {}
    overall_start = time.perf_counter()

    start = time.perf_counter()
    index = RouteKeyIndex.build(reference_routes)
    merged = merge_with_routes(records, index)
    timings["merge"] = round(time.perf_counter() - start, 3)

    start = time.perf_counter()
    resolve_shipment_coordinates(merged, location_maps or empty_location_maps())
    timings["shipment_coordinates"] = round(time.perf_counter() - start, 3)

    start = time.perf_counter()
    routes = aggregate_live_routes(merged, vehicle_positions)
    timings["aggregate"] = round(time.perf_counter() - start, 3)

    start = time.perf_counter()
    resolve_aggregate_coordinates(routes, locations, threshold)
    timings["route_coordinates"] = round(time.perf_counter() - start, 3)

    unmatched = collect_unmatched(merged)
    unmatched_routes = build_unmatched_routes(unmatched)
    timings["total"] = round(time.perf_counter() - overall_start, 3)

    logger.info(
        "Live route pipeline: %d records -> %d routes, %d unmatched pairs timings=%s",
        len(records),
        len(routes),
        len(unmatched),
        timings,
    )
    return LiveRoutePipelineResult(
        routes=routes,
        merged=merged,
        unmatched=unmatched,
        unmatched_routes=unmatched_routes,
        conflicts=list(index.conflicts),
        timings=timings,
    )
