"""
Fuzzy matching of route endpoint names against the Location reference list.

Tiers, first hit wins:
1. Exact name (case-insensitive)
2. Exact name with all whitespace removed
3. Endpoint core key contained in the location name (search-style)
4. Branch-code match or token Jaccard similarity >= threshold
"""
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from routesync.services.normalizer import build_endpoint_core_key, build_location_core_key
from routesync.services.records import LocationReference

DEFAULT_MATCH_THRESHOLD = 0.9

STOPWORDS = frozenset({"at", "hub", "the", "pvt", "ltd"})

_WHITESPACE_RE = re.compile(r"\s+")
_SPACE_BEFORE_PAREN_RE = re.compile(r"\s*\(")
_BASE_SYMBOL_RE = re.compile(r"[^a-z0-9()\s]+")
_PAREN_GROUP_RE = re.compile(r"\(([^)]+)\)")
_PAREN_CONTENT_RE = re.compile(r"\([^)]*\)")


@dataclass(frozen=True)
class LocationMatchScore:
    score: float  # 0..1
    by_code: bool


def normalize_base_name(name: Optional[str]) -> str:
    """Lowercase, keep only alphanumerics / spaces / parentheses, collapse spaces."""
    s = str(name or "").lower()
    s = _SPACE_BEFORE_PAREN_RE.sub(" (", s)
    s = _BASE_SYMBOL_RE.sub(" ", s)
    return _WHITESPACE_RE.sub(" ", s).strip()


def extract_code_lower(name: Optional[str]) -> str:
    """"Safexpress Ambala (AML-11)" -> "aml 11"; empty when there is no code."""
    matches = _PAREN_GROUP_RE.findall(normalize_base_name(name))
    if not matches:
        return ""
    return matches[-1].strip().lower()


def tokenize_name_without_code(name: Optional[str]) -> List[str]:
    norm = _PAREN_CONTENT_RE.sub(" ", normalize_base_name(name))
    return [token for token in norm.split() if token not in STOPWORDS]


def jaccard_similarity(tokens_a: Iterable[str], tokens_b: Iterable[str]) -> float:
    set_a = set(tokens_a)
    set_b = set(tokens_b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def compute_location_match_score(endpoint_name: str, candidate_name: str) -> LocationMatchScore:
    code_a = extract_code_lower(endpoint_name)
    code_b = extract_code_lower(candidate_name)
    if code_a and code_b and code_a == code_b:
        return LocationMatchScore(score=1.0, by_code=True)

    score = jaccard_similarity(
        tokenize_name_without_code(endpoint_name),
        tokenize_name_without_code(candidate_name),
    )
    return LocationMatchScore(score=score, by_code=False)


def _strip_all_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("", value)


def find_best_location_match(
    endpoint_name: Optional[str],
    locations: Sequence[LocationReference],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> Optional[LocationReference]:
    """
    Best Location for a route endpoint name, or None.

    Args:
        endpoint_name: route source / destination as stored on the route
        locations: full Location reference list, in its stored order
        threshold: minimum tier-4 score to accept

    Returns:
        the matching LocationReference, or None when no tier matched
    """
    endpoint_trim = str(endpoint_name or "").strip()
    if not endpoint_trim or not locations:
        return None

    endpoint_lower = endpoint_trim.lower()
    for loc in locations:
        if str(loc.name or "").strip().lower() == endpoint_lower:
            return loc

    endpoint_no_space = _strip_all_whitespace(endpoint_lower)
    for loc in locations:
        if _strip_all_whitespace(str(loc.name or "").strip().lower()) == endpoint_no_space:
            return loc

    endpoint_core = build_endpoint_core_key(endpoint_trim)
    if endpoint_core:
        for loc in locations:
            loc_no_space = _strip_all_whitespace(str(loc.name or "").lower())
            if endpoint_core in loc_no_space or endpoint_core in build_location_core_key(loc.name):
                return loc

    best: Optional[LocationReference] = None
    best_score = 0.0
    best_by_code = False

    for loc in locations:
        match = compute_location_match_score(endpoint_trim, loc.name)
        is_better = match.score > best_score or (
            match.by_code and not best_by_code and match.score == best_score
        )
        if is_better:
            best = loc
            best_score = match.score
            best_by_code = match.by_code

    if best is None or best_score < threshold:
        return None
    return best
