import pytest

from vdfd.domain.routes import (
    apply_route_update,
    distance_between,
    estimate_duration,
    new_route,
    optimize_order,
    route_stats,
    total_distance,
)
from vdfd.domain.types import Coordinate, Waypoint

from conftest import T0


def _wp(lat: float, lng: float, order: int, **kw) -> Waypoint:
    return Waypoint(lat=lat, lng=lng, address=f"{lat},{lng}", order=order, **kw)


def test_distance_is_zero_for_same_point_and_symmetric():
    a = Coordinate(42.33, -83.05)
    b = Coordinate(42.48, -83.47)
    assert distance_between(a, a) == 0.0
    assert distance_between(a, b) == pytest.approx(distance_between(b, a))
    assert distance_between(a, b) > 0


def test_one_degree_of_latitude_is_about_69_miles():
    assert distance_between(Coordinate(0, 0), Coordinate(1, 0)) == pytest.approx(69.097, abs=0.01)


def test_total_distance_sums_consecutive_legs():
    wps = [_wp(0, 0, 1), _wp(0, 1, 2), _wp(0, 3, 3)]
    expected = distance_between(wps[0], wps[1]) + distance_between(wps[1], wps[2])
    assert total_distance(wps) == pytest.approx(expected)
    assert total_distance(wps[:1]) == 0.0
    assert total_distance([]) == 0.0


def test_estimate_duration_at_average_speed():
    assert estimate_duration(30.0, 30.0) == 60
    assert estimate_duration(10.0) == 20
    assert estimate_duration(0.0) == 0


def test_estimate_duration_rejects_non_positive_speed():
    with pytest.raises(ValueError):
        estimate_duration(10.0, 0)
    with pytest.raises(ValueError):
        estimate_duration(10.0, -5)


def test_optimize_keeps_first_stop_and_visits_nearest_next():
    wps = [_wp(0, 0, 1), _wp(0, 2, 2), _wp(0, 1, 3), _wp(0, 3, 4)]
    out = optimize_order(wps)

    assert [w.lng for w in out] == [0, 1, 2, 3]
    assert [w.order for w in out] == [1, 2, 3, 4]
    assert sorted((w.lat, w.lng) for w in out) == sorted((w.lat, w.lng) for w in wps)


def test_optimize_from_start_point():
    wps = [_wp(0, 0, 1), _wp(0, 2, 2), _wp(0, 1, 3), _wp(0, 3, 4)]
    out = optimize_order(wps, Coordinate(0, 3.1))
    assert [w.lng for w in out] == [3, 2, 1, 0]
    assert [w.order for w in out] == [1, 2, 3, 4]


def test_optimize_ties_go_to_the_first_listed_waypoint():
    wps = [_wp(0, 1, 1), _wp(0, -1, 2), _wp(0, 5, 3)]
    out = optimize_order(wps, Coordinate(0, 0))
    assert [w.lng for w in out] == [1, -1, 5]


def test_optimize_leaves_two_or_fewer_waypoints_alone():
    wps = [_wp(0, 5, 1), _wp(0, 0, 2)]
    assert optimize_order(wps, Coordinate(0, 0)) == wps
    assert optimize_order([]) == []


def test_route_stats_counts_completed_and_uses_order():
    wps = [_wp(0, 1, 2, completed=True), _wp(0, 0, 1), _wp(0, 2, 3, completed=True)]
    stats = route_stats(wps, now=T0)

    assert stats.waypoint_count == 3
    assert stats.completed_count == 2
    assert stats.total_distance == pytest.approx(distance_between(Coordinate(0, 0), Coordinate(0, 2)))
    assert stats.total_duration == estimate_duration(stats.total_distance)
    assert stats.last_updated == T0


def test_new_route_optimizes_and_computes_stats():
    draft = {"name": "Eastside loop", "waypoints": [_wp(0, 0, 1), _wp(0, 2, 2), _wp(0, 1, 3)]}
    route = new_route("u1", draft, now=T0, optimize=True)

    assert route.id.startswith("route_")
    assert route.is_optimized is True
    assert [w.lng for w in route.waypoints] == [0, 1, 2]
    assert route.stats.waypoint_count == 3
    assert route.created_at == route.updated_at == T0


def test_new_route_requires_a_name():
    with pytest.raises(ValueError):
        new_route("u1", {"name": "  "}, now=T0)


def test_new_route_rejects_caller_supplied_stats():
    with pytest.raises(ValueError):
        new_route("u1", {"name": "x", "stats": None}, now=T0)


def test_replacing_waypoints_clears_optimized_flag_and_recomputes_stats():
    route = new_route(
        "u1",
        {"name": "r", "waypoints": [_wp(0, 0, 1), _wp(0, 2, 2), _wp(0, 1, 3)]},
        now=T0,
        optimize=True,
    )
    later = T0.replace(hour=13)
    updated = apply_route_update(route, {"waypoints": [_wp(0, 0, 1), _wp(0, 4, 2)]}, now=later)

    assert updated.is_optimized is False
    assert updated.stats.waypoint_count == 2
    assert updated.stats.total_distance == pytest.approx(distance_between(Coordinate(0, 0), Coordinate(0, 4)))
    assert updated.updated_at == later
    assert updated.created_at == route.created_at


def test_renaming_keeps_optimized_flag():
    route = new_route(
        "u1",
        {"name": "r", "waypoints": [_wp(0, 0, 1), _wp(0, 2, 2), _wp(0, 1, 3)]},
        now=T0,
        optimize=True,
    )
    updated = apply_route_update(route, {"name": "renamed"}, now=T0)
    assert updated.name == "renamed"
    assert updated.is_optimized is True
