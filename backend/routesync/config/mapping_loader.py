"""
Utilities for loading export column mapping configuration.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "column_mappings.yaml"

# On Trip grid export: logical field -> header label
DEFAULT_LIVE_EXPORT_HEADERS: Dict[str, str] = {
    "vehicle_number": "Vehicle Number",
    "last_location_date": "Last Location Date",
    "vehicle_group": "Vehicle Group",
    "last_location": "Last Location",
    "speed_kmph": "Speed(Kmph)",
    "consigner_name": "Consigner Name",
    "consignee_name": "Consignee Name",
    "dispatch_date": "Dispatch Date",
    "eta": "ETA",
    "planned_distance": "Planned Distance(Kms)",
    "remaining_distance": "Remaining Distance(Kms)",
    "trip_status": "Trip Status",
    "delay_time": "Delay Time(HH:MM:SS)",
    "rps_number": "RPS No",
}

# RPS report export: logical field -> accepted (normalized) header labels
DEFAULT_RPS_HEADER_ALIASES: Dict[str, List[str]] = {
    "rps_no": ["rps number", "rps no", "rps"],
    "vehicle_no": ["vehicle number", "vehicle no"],
    "dispatch_date": ["dispatch date"],
    "closure_date": ["closure date"],
    "route_name": ["route name", "route"],
}


@lru_cache()
def load_mapping_config() -> Dict[str, Any]:
    if not CONFIG_PATH.exists():
        return {}
    with open(CONFIG_PATH, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def get_live_export_headers() -> Dict[str, str]:
    headers = dict(DEFAULT_LIVE_EXPORT_HEADERS)
    configured = load_mapping_config().get("live_export", {}).get("headers") or {}
    for field_name, label in configured.items():
        if field_name in headers and label:
            headers[field_name] = str(label)
    return headers


def get_rps_header_aliases() -> Dict[str, List[str]]:
    aliases = {k: list(v) for k, v in DEFAULT_RPS_HEADER_ALIASES.items()}
    configured = load_mapping_config().get("rps_export", {}).get("headers") or {}
    for field_name, labels in configured.items():
        if field_name not in aliases or not labels:
            continue
        if isinstance(labels, str):
            labels = [labels]
        aliases[field_name] = [str(label) for label in labels]
    return aliases
