"""
Live route sync - reference load, pipeline run and snapshot write in one call.
"""
import logging
import time
from dataclasses import asdict
from typing import Any, Dict, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from routesync.db.database import settings
from routesync.services.coordinates import LatLng, LocationMaps
from routesync.services.live_route_pipeline import run_live_route_pipeline
from routesync.services.records import RawShipmentRecord
from routesync.services.snapshot_store import (
    load_locations,
    load_reference_routes,
    save_live_route_snapshot,
    save_unmatched_routes,
)

logger = logging.getLogger(__name__)


def sync_live_routes(
    db: Session,
    records: Sequence[RawShipmentRecord],
    location_maps: Optional[LocationMaps] = None,
    vehicle_positions: Optional[Mapping[str, LatLng]] = None,
    threshold: Optional[float] = None,
) -> Dict[str, Any]:
    """Run the pipeline against the stored references and replace the live snapshot."""
    start = time.perf_counter()

    reference_routes = load_reference_routes(db)
    locations = load_locations(db)
    logger.info(
        "Loaded %d reference routes and %d locations",
        len(reference_routes),
        len(locations),
    )

    result = run_live_route_pipeline(
        records,
        reference_routes,
        locations,
        location_maps=location_maps,
        vehicle_positions=vehicle_positions,
        threshold=settings.location_match_threshold if threshold is None else threshold,
    )

    # Unmatched patterns first; their failure must not block the snapshot
    stored_unmatched = save_unmatched_routes(db, result.unmatched_routes)
    snapshot = save_live_route_snapshot(db, result.routes)

    timings = dict(result.timings)
    timings["sync_total"] = round(time.perf_counter() - start, 3)
    logger.info("Live route sync completed in %.2fs", timings["sync_total"])

    return {
        "records": len(records),
        "routes": snapshot["routes"],
        "vehicles": snapshot["vehicles"],
        "unmatched_pairs": len(result.unmatched),
        "unmatched_routes_stored": stored_unmatched,
        "conflicts": [asdict(conflict) for conflict in result.conflicts],
        "timings": timings,
    }
