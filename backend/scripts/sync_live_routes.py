"""
Script to rebuild the live route snapshot from locally downloaded files.

Usage:
    python scripts/sync_live_routes.py path/to/OnTripExport.xlsx [--telemetry snapshot.json]
    python scripts/sync_live_routes.py --rps path/to/RpsReport.xlsx
"""
import argparse
import logging
import sys
import os
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from routesync.db.database import Base, SessionLocal, engine, settings
from routesync.schemas.telemetry import TelemetrySnapshot
from routesync.services.file_parser import infer_file_type, load_live_export, read_export
from routesync.services.live_route_sync import sync_live_routes
from routesync.services.rps_trips import ingest_rps_export


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sync live routes or ingest an RPS report.")
    parser.add_argument("export", nargs="?", help="On Trip grid export (.xlsx or .csv)")
    parser.add_argument("--telemetry", help="Telemetry snapshot JSON (vehicles, cities, landmarks)")
    parser.add_argument("--rps", help="RPS report export to ingest into the Trip table")
    args = parser.parse_args(argv)
    if not args.export and not args.rps:
        parser.error("pass an export file and/or --rps")
    return args


def run(args) -> int:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        if args.export:
            export_path = Path(args.export)
            print(f"Reading export {export_path}...")
            records = load_live_export(export_path, export_path.name)

            location_maps = None
            vehicle_positions = None
            if args.telemetry:
                snapshot = TelemetrySnapshot.model_validate_json(Path(args.telemetry).read_text(encoding="utf-8"))
                location_maps = snapshot.location_maps()
                vehicle_positions = snapshot.vehicle_positions()
                print(f"Loaded telemetry: {len(snapshot.vehicles)} vehicles, "
                      f"{len(snapshot.cities)} cities, {len(snapshot.landmarks)} landmarks")

            summary = sync_live_routes(db, records, location_maps, vehicle_positions)
            print(f"✓ Live routes: {summary['routes']} routes, {summary['vehicles']} vehicles")
            print(f"  Unmatched pairs: {summary['unmatched_pairs']} "
                  f"({summary['unmatched_routes_stored']} new patterns stored)")
            for conflict in summary["conflicts"]:
                print(f"  ! Route key {conflict['key']}: {conflict['kept_id']} replaced {conflict['replaced_id']}")

        if args.rps:
            rps_path = Path(args.rps)
            print(f"\nIngesting RPS report {rps_path}...")
            df = read_export(rps_path, infer_file_type(rps_path.name))
            summary = ingest_rps_export(
                db,
                df,
                cutoff_days=settings.rps_dispatch_cutoff_days,
                batch_size=settings.rps_insert_batch_size,
            )
            print(f"✓ RPS: {summary['inserted']} new trips ({summary['recent']} recent of {summary['parsed']} parsed)")

        return 0
    except Exception as e:
        print(f"\n✗ Sync failed: {e}")
        import traceback
        traceback.print_exc()
        db.rollback()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    sys.exit(run(parse_args()))
