"""
String normalization shared by every matching stage.

All functions are total: ``None`` is treated as an empty string and nothing
here raises on bad input.
"""
import logging
import re
from datetime import datetime
from typing import Callable, Optional, Sequence

import pandas as pd

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_PAREN_GROUP_RE = re.compile(r"\(([^)]+)\)")
_PAREN_CONTENT_RE = re.compile(r"\([^)]*\)")
_SYMBOL_RE = re.compile(r"[^a-z0-9\s]+")
_BRAND_PREFIX_RE = re.compile(r"^safexpress\s+")
_FACILITY_SUFFIX_RE = re.compile(r"\s+(hub|sds|inbound|outbound)\s*$")

# Known export timestamp layouts:
# "2024-06-15 09:00:00" (Last Location Date) and "15/06/2024 09:00:00" (Dispatch Date, ETA)
_ISO_DATETIME_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})[ T](\d{2}):(\d{2}):(\d{2})$")
_DMY_DATETIME_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})[ T](\d{2}):(\d{2}):(\d{2})$")
# Any other year-first string is ISO 8601 and must not be read day-first
_YEAR_FIRST_RE = re.compile(r"^\d{4}-")


def _text(value) -> str:
    return "" if value is None else str(value)


def normalize_header(value: Optional[str]) -> str:
    """Collapse internal whitespace, trim and lowercase a column header."""
    return _WHITESPACE_RE.sub(" ", _text(value)).strip().lower()


def normalize_location_key(value: Optional[str]) -> str:
    """
    Key for city / landmark names and branch codes.

    Uppercase, then strip whitespace, hyphens, periods and underscores (in
    that order): "Safexpress - AMBALA (AML-11)" -> "SAFEXPRESSAMBALA(AML11)".
    """
    s = _text(value).upper()
    s = _WHITESPACE_RE.sub("", s)
    s = s.replace("-", "")
    s = s.replace(".", "")
    s = s.replace("_", "")
    return s


def normalize_simple(value: Optional[str]) -> str:
    """Lowercase and drop all whitespace. Used for route match keys."""
    return _WHITESPACE_RE.sub("", _text(value).lower())


def extract_parenthetical_code(value: Optional[str]) -> str:
    """Content of the last ``(...)`` group, trimmed; empty string if none."""
    matches = _PAREN_GROUP_RE.findall(_text(value))
    if not matches:
        return ""
    return matches[-1].strip()


# ---------------------------------------------------------------------------
# Core-key reduction steps
#
# Each step is a pure str -> str function. The order of a step tuple is part
# of its contract: e.g. the brand prefix is only recognised after symbols are
# dropped and whitespace is collapsed.
# ---------------------------------------------------------------------------

TransformStep = Callable[[str], str]


def lowercase(value: str) -> str:
    return value.lower()


def strip_parenthetical(value: str) -> str:
    """Replace every ``(...)`` group with a space."""
    return _PAREN_CONTENT_RE.sub(" ", value)


def hyphens_to_spaces(value: str) -> str:
    return value.replace("-", " ")


def drop_symbols(value: str) -> str:
    """Replace runs of anything but lowercase alphanumerics and whitespace with a space."""
    return _SYMBOL_RE.sub(" ", value)


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def strip_brand_prefix(value: str) -> str:
    """Drop a leading "safexpress " token."""
    return _BRAND_PREFIX_RE.sub("", value)


def strip_facility_suffix(value: str) -> str:
    """Drop a trailing hub / sds / inbound / outbound token."""
    return _FACILITY_SUFFIX_RE.sub("", value)


def remove_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("", value)


ENDPOINT_CORE_STEPS: Sequence[TransformStep] = (
    lowercase,
    strip_parenthetical,
    hyphens_to_spaces,
    drop_symbols,
    collapse_whitespace,
    strip_brand_prefix,
    strip_facility_suffix,
    collapse_whitespace,
    remove_whitespace,
)

LOCATION_CORE_STEPS: Sequence[TransformStep] = (
    lowercase,
    strip_parenthetical,
    hyphens_to_spaces,
    drop_symbols,
    remove_whitespace,
)


def apply_steps(value: Optional[str], steps: Sequence[TransformStep]) -> str:
    result = _text(value)
    for step in steps:
        result = step(result)
    return result


def build_endpoint_core_key(name: Optional[str]) -> str:
    """Core key of a route endpoint, e.g. "Safexpress Ambala-Hub (AML11)" -> "ambala"."""
    return apply_steps(name, ENDPOINT_CORE_STEPS)


def build_location_core_key(name: Optional[str]) -> str:
    """Core key of a Location reference name (no prefix/suffix stripping)."""
    return apply_steps(name, LOCATION_CORE_STEPS)


# ---------------------------------------------------------------------------
# Consigner / consignee segments
# ---------------------------------------------------------------------------

def extract_source_from_consigner(consigner_name: Optional[str]) -> str:
    """Text before the first ";" of the consigner, trimmed."""
    if not consigner_name:
        return ""
    return consigner_name.split(";")[0].strip()


def extract_destination_from_consignee(consignee_name: Optional[str]) -> str:
    """Text after the last ";" of the consignee, trimmed."""
    if not consignee_name:
        return ""
    return consignee_name.split(";")[-1].strip()


def extract_city_from_consigner(consigner_name: Optional[str]) -> str:
    """"LUCKNOW-11" -> "LUCKNOW"."""
    first_part = extract_source_from_consigner(consigner_name)
    return first_part.split("-")[0].strip()


def extract_city_from_consignee(consignee_name: Optional[str]) -> str:
    """"SAFEXPRESS AMBALA(AML11)" -> "AMBALA"."""
    last_part = extract_destination_from_consignee(consignee_name)
    before_paren = last_part.split("(")[0].strip()
    words = before_paren.split()
    return words[-1] if words else ""


def extract_branch_code_from_consignee(consignee_name: Optional[str]) -> str:
    """"SAFEXPRESS AMBALA(AML11)" -> "AML11"."""
    return extract_parenthetical_code(extract_destination_from_consignee(consignee_name))


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def parse_export_datetime(raw) -> Optional[datetime]:
    """
    Parse an export timestamp into a naive datetime.

    Accepts datetime-like values as-is, the two known string layouts, and
    finally anything pandas can read (day-first). Returns None for empty or
    unparseable values.
    """
    if raw is None:
        return None
    if isinstance(raw, pd.Timestamp):
        return None if pd.isna(raw) else raw.to_pydatetime()
    if isinstance(raw, datetime):
        return raw

    value = str(raw).strip()
    if not value:
        return None

    iso_match = _ISO_DATETIME_RE.match(value)
    if iso_match:
        y, m, d, hh, mm, ss = (int(part) for part in iso_match.groups())
        try:
            return datetime(y, m, d, hh, mm, ss)
        except ValueError:
            pass

    dmy_match = _DMY_DATETIME_RE.match(value)
    if dmy_match:
        d, m, y, hh, mm, ss = (int(part) for part in dmy_match.groups())
        try:
            return datetime(y, m, d, hh, mm, ss)
        except ValueError:
            pass

    try:
        if _YEAR_FIRST_RE.match(value):
            parsed = pd.to_datetime(value, format="ISO8601", errors="coerce")
        else:
            parsed = pd.to_datetime(value, dayfirst=True, errors="coerce")
    except (ValueError, TypeError):
        parsed = pd.NaT
    if pd.isna(parsed):
        logger.warning("Could not parse date-time string: %r", raw)
        return None
    return parsed.to_pydatetime()
