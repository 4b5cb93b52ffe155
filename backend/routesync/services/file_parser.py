"""
Export file reading and column extraction.
"""
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from routesync.config.mapping_loader import get_live_export_headers
from routesync.services.normalizer import normalize_header
from routesync.services.records import RawShipmentRecord

logger = logging.getLogger(__name__)

ExportSource = Union[str, Path, bytes, io.IOBase]


def infer_file_type(filename: str) -> str:
    """Infer file type from extension."""
    ext = Path(filename).suffix.lower()
    if ext == ".xlsx" or ext == ".xls":
        return "xlsx"
    elif ext == ".csv":
        return "csv"
    else:
        return ext.lstrip(".")


def _as_readable(source: ExportSource):
    if isinstance(source, bytes):
        return io.BytesIO(source)
    return source


def read_export(source: ExportSource, file_type: str) -> pd.DataFrame:
    """
    Read the first sheet of an export into a header-less DataFrame of strings.

    The header row is kept as row 0 so headers can be matched loosely.
    """
    if file_type == "xlsx":
        df = pd.read_excel(_as_readable(source), sheet_name=0, header=None, dtype=str)
        if df.empty:
            raise ValueError("No data found in Excel file")
        return df
    elif file_type == "csv":
        raw = source if isinstance(source, bytes) else None
        # Try different encodings
        for encoding in ["utf-8", "latin-1", "cp1252"]:
            try:
                readable = io.BytesIO(raw) if raw is not None else source
                if hasattr(readable, "seek"):
                    readable.seek(0)
                return pd.read_csv(readable, header=None, dtype=str, encoding=encoding)
            except UnicodeDecodeError:
                continue
        raise ValueError("Could not decode CSV file")
    else:
        raise ValueError(f"Unsupported file type: {file_type}")


def cell_text(value: Any) -> str:
    """Cell value as a trimmed string; empty for None / NaN."""
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


def build_header_index(header_row: List[Any]) -> Dict[str, int]:
    """Normalized header -> column position (later duplicates win)."""
    index: Dict[str, int] = {}
    for position, raw_header in enumerate(header_row):
        norm = normalize_header(cell_text(raw_header))
        if norm:
            index[norm] = position
    return index


def resolve_columns(header_index: Dict[str, int], headers: Dict[str, str]) -> Dict[str, Optional[int]]:
    return {field_name: header_index.get(normalize_header(label)) for field_name, label in headers.items()}


def parse_live_export(df: pd.DataFrame, headers: Optional[Dict[str, str]] = None) -> List[RawShipmentRecord]:
    """
    Convert a header-less export frame into RawShipmentRecords.

    Missing columns become empty strings; fully empty rows are dropped.
    """
    if df.empty:
        logger.warning("No rows found in export")
        return []

    headers = headers or get_live_export_headers()
    rows = df.values.tolist()
    header_index = build_header_index(rows[0])
    columns = resolve_columns(header_index, headers)

    missing = [field_name for field_name, position in columns.items() if position is None]
    if missing:
        logger.warning("Export is missing columns for %s; they will be empty", missing)
    logger.info("Resolved column indices: %s", columns)

    records: List[RawShipmentRecord] = []
    for row in rows[1:]:
        values = {
            field_name: cell_text(row[position]) if position is not None and position < len(row) else ""
            for field_name, position in columns.items()
        }
        if not any(values.values()):
            continue
        records.append(RawShipmentRecord(**values))

    logger.info("Extracted %d rows from export", len(records))
    return records


def load_live_export(source: ExportSource, filename: str) -> List[RawShipmentRecord]:
    return parse_live_export(read_export(source, infer_file_type(filename)))
