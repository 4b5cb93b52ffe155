"""
Lookup of reference routes by normalized (source, destination).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from routesync.services.normalizer import normalize_simple
from routesync.services.records import ReferenceRoute

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "___"


def make_route_key(source: Optional[str], destination: Optional[str]) -> str:
    """Case- and whitespace-insensitive key for a (source, destination) pair."""
    return f"{normalize_simple(source)}{KEY_SEPARATOR}{normalize_simple(destination)}"


@dataclass(frozen=True)
class RouteKeyConflict:
    """Two reference routes normalized to the same key; ``kept_id`` won."""
    key: str
    kept_id: str
    replaced_id: str


class RouteKeyIndex:
    """
    Immutable route lookup, built once per pipeline run.

    Duplicate keys resolve last-wins (iteration order of the reference list).
    Every overwrite is kept in ``conflicts`` so callers can surface it to
    whoever owns the route reference.
    """

    def __init__(
        self,
        routes_by_key: Mapping[str, ReferenceRoute],
        conflicts: Tuple[RouteKeyConflict, ...] = (),
    ):
        self._routes_by_key = MappingProxyType(dict(routes_by_key))
        self._conflicts = tuple(conflicts)

    @classmethod
    def build(cls, routes: Iterable[ReferenceRoute]) -> "RouteKeyIndex":
        routes_by_key: Dict[str, ReferenceRoute] = {}
        conflicts: List[RouteKeyConflict] = []
        skipped = 0

        for route in routes:
            if not route.source or not route.destination:
                skipped += 1
                continue

            key = make_route_key(route.source, route.destination)
            previous = routes_by_key.get(key)
            if previous is not None and previous.id != route.id:
                conflicts.append(
                    RouteKeyConflict(key=key, kept_id=route.id, replaced_id=previous.id)
                )
                logger.warning(
                    "Route key collision on %s: route %s replaces route %s",
                    key,
                    route.id,
                    previous.id,
                )
            routes_by_key[key] = route

        logger.info(
            "Route index built with %d (source, destination) keys (%d skipped, %d conflicts)",
            len(routes_by_key),
            skipped,
            len(conflicts),
        )
        return cls(routes_by_key, tuple(conflicts))

    def lookup(self, key: str) -> Optional[ReferenceRoute]:
        return self._routes_by_key.get(key)

    @property
    def conflicts(self) -> Tuple[RouteKeyConflict, ...]:
        return self._conflicts

    def __len__(self) -> int:
        return len(self._routes_by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._routes_by_key

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes_by_key)
