# vdfd/schemas.py
from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from .integrations.base import RemoteResult
from .domain.types import (
    DistressIndicators,
    Lead,
    LeadStatus,
    PropertyType,
    Route,
    RouteStats,
    RouteStatus,
    StreetViewPOV,
    SyncStatus,
    Waypoint,
)

PropertyTypeName = Literal["sfh", "duplex", "multi", "vacant", "commercial"]
LeadStatusName = Literal["new", "contacted", "qualified", "dead", "closed"]
RouteStatusName = Literal["draft", "planned", "in-progress", "completed", "archived"]
ExportFormat = Literal["csv", "json", "pdf"]


class PovModel(BaseModel):
    heading: float = Field(0.0, ge=0, le=360)
    pitch: float = Field(0.0, ge=-90, le=90)
    zoom: float = Field(1.0, ge=0)


class IndicatorsModel(BaseModel):
    overgrown_lawn: bool = False
    boarded_windows: bool = False
    roof_damage: bool = False
    peeling_paint: bool = False
    broken_fences: bool = False
    for_sale_sign: bool = False
    code_violations: bool = False
    other: list[str] = Field(default_factory=list)


class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


# -----------------------------
# Leads
# -----------------------------
class LeadCreate(BaseModel):
    address: str = ""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    pov: PovModel = Field(default_factory=PovModel)

    property_type: PropertyTypeName = "sfh"
    estimated_value: float | None = Field(default=None, ge=0)

    indicators: IndicatorsModel = Field(default_factory=IndicatorsModel)

    notes: str = ""
    priority_rating: int = Field(3, ge=1, le=5)
    screenshots: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    status: LeadStatusName = "new"
    claimed_by: str | None = None
    shared_with: list[str] = Field(default_factory=list)

    owner_name: str | None = None
    owner_phone: str | None = None
    owner_email: str | None = None
    last_contact_date: datetime | None = None
    arv: float | None = Field(default=None, ge=0)
    repair_estimate: float | None = Field(default=None, ge=0)
    max_offer: float | None = Field(default=None, ge=0)


class LeadUpdate(BaseModel):
    """Partial update; only fields actually sent are applied."""

    address: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    pov: PovModel | None = None

    property_type: PropertyTypeName | None = None
    estimated_value: float | None = Field(default=None, ge=0)

    indicators: IndicatorsModel | None = None

    notes: str | None = None
    priority_rating: int | None = Field(default=None, ge=1, le=5)
    screenshots: list[str] | None = None
    tags: list[str] | None = None

    status: LeadStatusName | None = None
    claimed_by: str | None = None
    shared_with: list[str] | None = None

    owner_name: str | None = None
    owner_phone: str | None = None
    owner_email: str | None = None
    last_contact_date: datetime | None = None
    arv: float | None = Field(default=None, ge=0)
    repair_estimate: float | None = Field(default=None, ge=0)
    max_offer: float | None = Field(default=None, ge=0)

    def changes(self) -> dict[str, Any]:
        # explicit null only clears optional fields
        return {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in _CLEARABLE_LEAD_FIELDS
        }


_CLEARABLE_LEAD_FIELDS = {
    "estimated_value",
    "claimed_by",
    "owner_name",
    "owner_phone",
    "owner_email",
    "last_contact_date",
    "arv",
    "repair_estimate",
    "max_offer",
}


class LeadOut(BaseModel):
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    address: str
    lat: float
    lng: float
    pov: PovModel

    property_type: PropertyTypeName
    estimated_value: float | None = None

    distress_score: int = Field(..., ge=0, le=100)
    indicators: IndicatorsModel

    notes: str = ""
    priority_rating: int = Field(..., ge=1, le=5)
    screenshots: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    status: LeadStatusName
    claimed_by: str | None = None
    shared_with: list[str] = Field(default_factory=list)

    owner_name: str | None = None
    owner_phone: str | None = None
    owner_email: str | None = None
    last_contact_date: datetime | None = None
    arv: float | None = None
    repair_estimate: float | None = None
    max_offer: float | None = None

    sync_status: str = SyncStatus.local_committed.value

    @classmethod
    def from_domain(cls, lead: Lead) -> "LeadOut":
        d = asdict(lead)
        d.pop("sync_error", None)
        d["property_type"] = lead.property_type.value
        d["status"] = lead.status.value
        d["sync_status"] = lead.sync_status.value
        return cls.model_validate(d)

    def to_domain(self) -> Lead:
        ind = self.indicators.model_dump()
        ind["other"] = tuple(ind["other"])
        return Lead(
            id=self.id,
            user_id=self.user_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            address=self.address,
            lat=self.lat,
            lng=self.lng,
            pov=StreetViewPOV(**self.pov.model_dump()),
            property_type=PropertyType(self.property_type),
            estimated_value=self.estimated_value,
            distress_score=self.distress_score,
            indicators=DistressIndicators(**ind),
            notes=self.notes,
            priority_rating=self.priority_rating,
            screenshots=tuple(self.screenshots),
            tags=tuple(self.tags),
            status=LeadStatus(self.status),
            claimed_by=self.claimed_by,
            shared_with=tuple(self.shared_with),
            owner_name=self.owner_name,
            owner_phone=self.owner_phone,
            owner_email=self.owner_email,
            last_contact_date=self.last_contact_date,
            arv=self.arv,
            repair_estimate=self.repair_estimate,
            max_offer=self.max_offer,
            sync_status=SyncStatus(self.sync_status),
        )


def lead_document(lead: Lead) -> dict[str, Any]:
    """JSON-safe whole-record document (remote mirror + JSON export)."""
    return LeadOut.from_domain(lead).model_dump(mode="json", exclude={"sync_status"})


class LeadStatsOut(BaseModel):
    total: int
    by_status: dict[str, int]
    by_property_type: dict[str, int]
    by_priority: dict[int, int]
    average_distress_score: float
    total_value: float | None = None
    this_week: int
    this_month: int


# -----------------------------
# Routes
# -----------------------------
class WaypointModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: str = ""
    order: int = Field(..., ge=1)
    lead_id: str | None = None
    notes: str | None = None
    completed: bool = False
    visit_duration: int | None = Field(default=None, ge=0)

    def to_domain(self) -> Waypoint:
        return Waypoint(**self.model_dump())


class RouteStatsModel(BaseModel):
    total_distance: float
    total_duration: int
    waypoint_count: int
    completed_count: int
    last_updated: datetime


class RouteCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    waypoints: list[WaypointModel] = Field(default_factory=list)
    optimize: bool = False
    start_point: CoordinateModel | None = None
    shared_with: list[str] = Field(default_factory=list)
    is_public: bool = False
    tags: list[str] = Field(default_factory=list)
    status: RouteStatusName = "draft"
    scheduled_date: datetime | None = None


class RouteFromLeads(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    lead_ids: list[str] = Field(..., min_length=1)
    optimize: bool = True
    start_point: CoordinateModel | None = None


class RouteUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    waypoints: list[WaypointModel] | None = None
    shared_with: list[str] | None = None
    is_public: bool | None = None
    tags: list[str] | None = None
    status: RouteStatusName | None = None
    scheduled_date: datetime | None = None
    completed_date: datetime | None = None

    def changes(self) -> dict[str, Any]:
        d = {
            k: v
            for k, v in self.model_dump(exclude_unset=True, exclude={"waypoints"}).items()
            if v is not None or k in ("scheduled_date", "completed_date")
        }
        if "waypoints" in self.model_fields_set:
            d["waypoints"] = [w.to_domain() for w in (self.waypoints or [])]
        return d


class OptimizeRequest(BaseModel):
    start_point: CoordinateModel | None = None


class RouteOut(BaseModel):
    id: str
    user_id: str
    name: str
    description: str = ""
    created_at: datetime
    updated_at: datetime
    waypoints: list[WaypointModel]
    stats: RouteStatsModel
    is_optimized: bool
    shared_with: list[str] = Field(default_factory=list)
    is_public: bool = False
    tags: list[str] = Field(default_factory=list)
    status: RouteStatusName
    scheduled_date: datetime | None = None
    completed_date: datetime | None = None
    sync_status: str = SyncStatus.local_committed.value

    @classmethod
    def from_domain(cls, route: Route) -> "RouteOut":
        d = asdict(route)
        d.pop("sync_error", None)
        d["status"] = route.status.value
        d["sync_status"] = route.sync_status.value
        return cls.model_validate(d)

    def to_domain(self) -> Route:
        return Route(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            description=self.description,
            created_at=self.created_at,
            updated_at=self.updated_at,
            waypoints=tuple(w.to_domain() for w in self.waypoints),
            stats=RouteStats(**self.stats.model_dump()),
            is_optimized=self.is_optimized,
            shared_with=tuple(self.shared_with),
            is_public=self.is_public,
            tags=tuple(self.tags),
            status=RouteStatus(self.status),
            scheduled_date=self.scheduled_date,
            completed_date=self.completed_date,
            sync_status=SyncStatus(self.sync_status),
        )


def route_document(route: Route) -> dict[str, Any]:
    return RouteOut.from_domain(route).model_dump(mode="json", exclude={"sync_status"})


# -----------------------------
# Write results (local outcome + remote outcome)
# -----------------------------
class RemoteResultOut(BaseModel):
    ok: bool
    error: str | None = None
    skipped: bool = False

    @classmethod
    def from_result(cls, res: RemoteResult) -> "RemoteResultOut":
        return cls(ok=res.ok, error=res.error, skipped=res.skipped)


class LeadWriteOut(BaseModel):
    record: LeadOut
    remote: RemoteResultOut


class RouteWriteOut(BaseModel):
    record: RouteOut
    remote: RemoteResultOut


class DeleteOut(BaseModel):
    id: str
    deleted: bool
    remote: RemoteResultOut


class SyncPushOut(BaseModel):
    attempted: int = Field(..., ge=0)
    synced: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)


class ReverseGeocodeOut(BaseModel):
    lat: float
    lng: float
    address: str
    resolved: bool
