import pytest

from routesync.services.records import ReferenceRoute, RouteSide
from routesync.services.route_index import RouteKeyIndex, make_route_key


def _route(route_id, source, destination, side=RouteSide.UP):
    return ReferenceRoute(id=route_id, name=f"{source}/{destination}", side=side, source=source, destination=destination)


@pytest.mark.parametrize(
    "source,destination",
    [("Lucknow", "Ambala(AML11)"), ("  lucknow ", " AMBALA (AML11)"), ("LUCK NOW", "ambala(aml11)")],
)
def test_make_route_key_ignores_case_and_whitespace(source, destination):
    assert make_route_key(source, destination) == "lucknow___ambala(aml11)"


def test_build_skips_routes_without_endpoints():
    index = RouteKeyIndex.build([
        _route("R1", "LUCKNOW", "AMBALA"),
        _route("R2", "", "DELHI"),
        _route("R3", "KANPUR", None),
    ])
    assert len(index) == 1
    assert "lucknow___ambala" in index
    assert index.lookup("lucknow___ambala").id == "R1"
    assert index.lookup("kanpur___") is None


def test_duplicate_keys_resolve_last_wins_and_report_conflict():
    index = RouteKeyIndex.build([
        _route("R1", "LUCKNOW", "AMBALA"),
        _route("R2", "lucknow", " ambala "),
    ])
    assert index.lookup("lucknow___ambala").id == "R2"
    assert len(index.conflicts) == 1
    conflict = index.conflicts[0]
    assert conflict.key == "lucknow___ambala"
    assert conflict.kept_id == "R2"
    assert conflict.replaced_id == "R1"


def test_same_route_twice_is_not_a_conflict():
    route = _route("R1", "LUCKNOW", "AMBALA")
    index = RouteKeyIndex.build([route, route])
    assert index.conflicts == ()
    assert list(index) == ["lucknow___ambala"]


def test_indexes_built_separately_do_not_share_state():
    first = RouteKeyIndex.build([_route("R1", "A", "B")])
    second = RouteKeyIndex.build([_route("R2", "C", "D")])
    assert "a___b" in first and "a___b" not in second
    assert "c___d" in second and "c___d" not in first
