# vdfd/domain/routes.py
from __future__ import annotations

import math
import uuid
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Iterable, Sequence

from .clock import as_naive_utc
from .distress import round_half_up
from .types import Coordinate, Lead, Route, RouteStats, RouteStatus, Waypoint

EARTH_RADIUS_MILES = 3959.0
DEFAULT_AVERAGE_SPEED_MPH = 30.0

_IMMUTABLE_ROUTE_FIELDS = {"id", "user_id", "created_at", "stats"}
_DATE_ROUTE_FIELDS = ("scheduled_date", "completed_date")


def _to_rad(degrees: float) -> float:
    return degrees * (math.pi / 180.0)


def distance_between(a: Coordinate | Waypoint, b: Coordinate | Waypoint) -> float:
    """Great-circle distance in miles (haversine)."""
    d_lat = _to_rad(b.lat - a.lat)
    d_lng = _to_rad(b.lng - a.lng)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(_to_rad(a.lat)) * math.cos(_to_rad(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    # guard tiny float overshoot before sqrt(1 - h)
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def total_distance(waypoints: Sequence[Waypoint]) -> float:
    if len(waypoints) < 2:
        return 0.0
    return sum(distance_between(waypoints[i], waypoints[i + 1]) for i in range(len(waypoints) - 1))


def estimate_duration(distance: float, average_speed: float = DEFAULT_AVERAGE_SPEED_MPH) -> int:
    """Driving minutes at a flat average speed (mph)."""
    if average_speed <= 0:
        raise ValueError(f"average_speed must be > 0, got {average_speed}")
    return round_half_up(distance / average_speed * 60)


def optimize_order(
    waypoints: Sequence[Waypoint],
    start_point: Coordinate | None = None,
) -> list[Waypoint]:
    """
    Greedy nearest-neighbour ordering. A heuristic, not a shortest tour.

    Without a start point the first waypoint stays the first stop. Ties go to
    the waypoint that appears first in the input. Orders are reassigned 1..N.
    """
    if len(waypoints) <= 2:
        return list(waypoints)

    remaining = list(waypoints)
    visited: list[Waypoint] = []

    current: Coordinate | Waypoint
    if start_point is None:
        current = remaining.pop(0)
        visited.append(current)
    else:
        current = start_point

    while remaining:
        nearest_idx = 0
        best = math.inf
        for idx, wp in enumerate(remaining):
            d = distance_between(current, wp)
            if d < best:
                best = d
                nearest_idx = idx
        current = remaining.pop(nearest_idx)
        visited.append(current)

    return renumber(visited)


def renumber(waypoints: Iterable[Waypoint]) -> list[Waypoint]:
    return [replace(wp, order=i + 1) for i, wp in enumerate(waypoints)]


def route_stats(
    waypoints: Sequence[Waypoint],
    *,
    now: datetime,
    average_speed: float = DEFAULT_AVERAGE_SPEED_MPH,
) -> RouteStats:
    ordered = sorted(waypoints, key=lambda w: w.order)
    dist = total_distance(ordered)
    return RouteStats(
        total_distance=dist,
        total_duration=estimate_duration(dist, average_speed),
        waypoint_count=len(ordered),
        completed_count=sum(1 for w in ordered if w.completed),
        last_updated=now,
    )


def waypoint_from_lead(lead: Lead, order: int) -> Waypoint:
    return Waypoint(
        lat=lead.lat,
        lng=lead.lng,
        address=lead.address,
        order=order,
        notes=lead.notes or None,
        lead_id=lead.id,
        completed=False,
    )


def new_route_id() -> str:
    return f"route_{uuid.uuid4().hex}"


def new_route(
    user_id: str,
    draft: dict[str, Any],
    *,
    now: datetime,
    route_id: str | None = None,
    optimize: bool = False,
    start_point: Coordinate | None = None,
    average_speed: float = DEFAULT_AVERAGE_SPEED_MPH,
) -> Route:
    if not user_id:
        raise ValueError("user_id is required")

    data = dict(draft)
    unknown = set(data) - {f.name for f in fields(Route)}
    if unknown:
        raise ValueError(f"Unknown route fields: {sorted(unknown)}")
    bad = set(data) & (_IMMUTABLE_ROUTE_FIELDS | {"updated_at", "sync_status", "sync_error"})
    if bad:
        raise ValueError(f"Route fields cannot be set on create: {sorted(bad)}")
    if not (data.get("name") or "").strip():
        raise ValueError("Route name is required")

    waypoints = list(data.pop("waypoints", ()) or ())
    is_optimized = bool(data.pop("is_optimized", False))
    if optimize:
        waypoints = optimize_order(waypoints, start_point)
    waypoints = sorted(waypoints, key=lambda w: w.order)

    for key in ("shared_with", "tags"):
        if key in data:
            data[key] = tuple(data[key] or ())
    if "status" in data:
        data["status"] = RouteStatus(data["status"])
    for key in _DATE_ROUTE_FIELDS:
        if key in data:
            data[key] = as_naive_utc(data[key])

    return Route(
        id=route_id or new_route_id(),
        user_id=user_id,
        created_at=now,
        updated_at=now,
        waypoints=tuple(waypoints),
        stats=route_stats(waypoints, now=now, average_speed=average_speed),
        is_optimized=optimize or is_optimized,
        **data,
    )


def apply_route_update(
    route: Route,
    changes: dict[str, Any],
    *,
    now: datetime,
    optimize: bool = False,
    start_point: Coordinate | None = None,
    average_speed: float = DEFAULT_AVERAGE_SPEED_MPH,
) -> Route:
    """Shallow merge; stats are always recomputed from the resulting waypoints."""
    changes = dict(changes)
    bad = set(changes) & (_IMMUTABLE_ROUTE_FIELDS | {"updated_at", "sync_status", "sync_error"})
    if bad:
        raise ValueError(f"Route fields cannot be updated: {sorted(bad)}")
    unknown = set(changes) - {f.name for f in fields(Route)}
    if unknown:
        raise ValueError(f"Unknown route fields: {sorted(unknown)}")

    for key in ("shared_with", "tags"):
        if key in changes:
            changes[key] = tuple(changes[key] or ())
    if "status" in changes:
        changes["status"] = RouteStatus(changes["status"])
    for key in _DATE_ROUTE_FIELDS:
        if key in changes:
            changes[key] = as_naive_utc(changes[key])

    # a new waypoint list is no longer the optimized order unless re-optimized
    default_optimized = False if "waypoints" in changes else route.is_optimized
    waypoints = list(changes.pop("waypoints", route.waypoints))
    is_optimized = changes.pop("is_optimized", default_optimized)
    if optimize:
        waypoints = optimize_order(waypoints, start_point)
        is_optimized = True
    waypoints = sorted(waypoints, key=lambda w: w.order)

    return replace(
        route,
        **changes,
        waypoints=tuple(waypoints),
        is_optimized=bool(is_optimized),
        stats=route_stats(waypoints, now=now, average_speed=average_speed),
        updated_at=now,
    )
