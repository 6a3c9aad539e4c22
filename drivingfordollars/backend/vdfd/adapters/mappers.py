# vdfd/adapters/mappers.py
from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from typing import Any

from ..domain.types import (
    DistressIndicators,
    Lead,
    Route,
    RouteStats,
    StreetViewPOV,
    Waypoint,
)
from ..models import LeadRow, RouteRow


def _dt(v: datetime | None) -> str | None:
    return v.isoformat() if v is not None else None


def _parse_dt(v: str | None) -> datetime | None:
    return datetime.fromisoformat(v) if v else None


# -----------------------------
# Lead <-> row
# -----------------------------
def lead_to_row_fields(lead: Lead) -> dict[str, Any]:
    return {
        "id": lead.id,
        "user_id": lead.user_id,
        "created_at": lead.created_at,
        "updated_at": lead.updated_at,
        "address": lead.address,
        "lat": lead.lat,
        "lng": lead.lng,
        "pov_json": json.dumps(asdict(lead.pov)),
        "property_type": lead.property_type,
        "estimated_value": lead.estimated_value,
        "distress_score": lead.distress_score,
        "indicators_json": json.dumps(asdict(lead.indicators)),
        "notes": lead.notes,
        "priority_rating": lead.priority_rating,
        "screenshots_json": json.dumps(list(lead.screenshots)),
        "tags_json": json.dumps(list(lead.tags)),
        "status": lead.status,
        "claimed_by": lead.claimed_by,
        "shared_with_json": json.dumps(list(lead.shared_with)),
        "owner_name": lead.owner_name,
        "owner_phone": lead.owner_phone,
        "owner_email": lead.owner_email,
        "last_contact_date": lead.last_contact_date,
        "arv": lead.arv,
        "repair_estimate": lead.repair_estimate,
        "max_offer": lead.max_offer,
        "sync_status": lead.sync_status,
        "sync_error": lead.sync_error,
    }


def lead_from_row(row: LeadRow) -> Lead:
    ind = json.loads(row.indicators_json or "{}")
    ind["other"] = tuple(ind.get("other") or ())
    return Lead(
        id=row.id,
        user_id=row.user_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        address=row.address,
        lat=row.lat,
        lng=row.lng,
        pov=StreetViewPOV(**json.loads(row.pov_json or "{}")),
        property_type=row.property_type,
        estimated_value=row.estimated_value,
        distress_score=row.distress_score,
        indicators=DistressIndicators(**ind),
        notes=row.notes,
        priority_rating=row.priority_rating,
        screenshots=tuple(json.loads(row.screenshots_json or "[]")),
        tags=tuple(json.loads(row.tags_json or "[]")),
        status=row.status,
        claimed_by=row.claimed_by,
        shared_with=tuple(json.loads(row.shared_with_json or "[]")),
        owner_name=row.owner_name,
        owner_phone=row.owner_phone,
        owner_email=row.owner_email,
        last_contact_date=row.last_contact_date,
        arv=row.arv,
        repair_estimate=row.repair_estimate,
        max_offer=row.max_offer,
        sync_status=row.sync_status,
        sync_error=row.sync_error,
    )


# -----------------------------
# Route <-> row
# -----------------------------
def _stats_to_dict(stats: RouteStats) -> dict[str, Any]:
    d = asdict(stats)
    d["last_updated"] = _dt(stats.last_updated)
    return d


def _stats_from_dict(d: dict[str, Any]) -> RouteStats:
    return RouteStats(
        total_distance=float(d["total_distance"]),
        total_duration=int(d["total_duration"]),
        waypoint_count=int(d["waypoint_count"]),
        completed_count=int(d["completed_count"]),
        last_updated=_parse_dt(d["last_updated"]),
    )


def route_to_row_fields(route: Route) -> dict[str, Any]:
    return {
        "id": route.id,
        "user_id": route.user_id,
        "name": route.name,
        "description": route.description,
        "created_at": route.created_at,
        "updated_at": route.updated_at,
        "waypoints_json": json.dumps([asdict(w) for w in route.waypoints]),
        "stats_json": json.dumps(_stats_to_dict(route.stats)),
        "is_optimized": route.is_optimized,
        "shared_with_json": json.dumps(list(route.shared_with)),
        "is_public": route.is_public,
        "tags_json": json.dumps(list(route.tags)),
        "status": route.status,
        "scheduled_date": route.scheduled_date,
        "completed_date": route.completed_date,
        "sync_status": route.sync_status,
        "sync_error": route.sync_error,
    }


def route_from_row(row: RouteRow) -> Route:
    return Route(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        description=row.description,
        created_at=row.created_at,
        updated_at=row.updated_at,
        waypoints=tuple(Waypoint(**w) for w in json.loads(row.waypoints_json or "[]")),
        stats=_stats_from_dict(json.loads(row.stats_json)),
        is_optimized=row.is_optimized,
        shared_with=tuple(json.loads(row.shared_with_json or "[]")),
        is_public=row.is_public,
        tags=tuple(json.loads(row.tags_json or "[]")),
        status=row.status,
        scheduled_date=row.scheduled_date,
        completed_date=row.completed_date,
        sync_status=row.sync_status,
        sync_error=row.sync_error,
    )
