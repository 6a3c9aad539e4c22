# vdfd/domain/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PropertyType(str, Enum):
    sfh = "sfh"
    duplex = "duplex"
    multi = "multi"
    vacant = "vacant"
    commercial = "commercial"


class LeadStatus(str, Enum):
    new = "new"
    contacted = "contacted"
    qualified = "qualified"
    dead = "dead"
    closed = "closed"


class RouteStatus(str, Enum):
    draft = "draft"
    planned = "planned"
    in_progress = "in-progress"
    completed = "completed"
    archived = "archived"


class SyncStatus(str, Enum):
    local_committed = "local_committed"
    remote_synced = "remote_synced"
    remote_sync_failed = "remote_sync_failed"


FIXED_INDICATORS: tuple[str, ...] = (
    "overgrown_lawn",
    "boarded_windows",
    "roof_damage",
    "peeling_paint",
    "broken_fences",
    "for_sale_sign",
    "code_violations",
)


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class StreetViewPOV:
    heading: float = 0.0  # 0-360, compass direction
    pitch: float = 0.0  # -90..90
    zoom: float = 1.0  # >= 0

    def __post_init__(self) -> None:
        if not 0.0 <= self.heading <= 360.0:
            raise ValueError(f"heading out of range [0,360]: {self.heading}")
        if not -90.0 <= self.pitch <= 90.0:
            raise ValueError(f"pitch out of range [-90,90]: {self.pitch}")
        if self.zoom < 0:
            raise ValueError(f"zoom must be >= 0: {self.zoom}")


@dataclass(frozen=True)
class DistressIndicators:
    overgrown_lawn: bool = False
    boarded_windows: bool = False
    roof_damage: bool = False
    peeling_paint: bool = False
    broken_fences: bool = False
    for_sale_sign: bool = False
    code_violations: bool = False
    other: tuple[str, ...] = ()

    def fixed_flags(self) -> dict[str, bool]:
        return {name: bool(getattr(self, name)) for name in FIXED_INDICATORS}


@dataclass(frozen=True)
class Lead:
    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

    address: str
    lat: float
    lng: float
    pov: StreetViewPOV

    property_type: PropertyType
    distress_score: int
    indicators: DistressIndicators

    notes: str = ""
    priority_rating: int = 3
    screenshots: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    status: LeadStatus = LeadStatus.new
    estimated_value: float | None = None
    claimed_by: str | None = None
    shared_with: tuple[str, ...] = ()

    # optional marketing / deal data
    owner_name: str | None = None
    owner_phone: str | None = None
    owner_email: str | None = None
    last_contact_date: datetime | None = None
    arv: float | None = None
    repair_estimate: float | None = None
    max_offer: float | None = None

    # sync metadata (not part of the record's identity)
    sync_status: SyncStatus = field(default=SyncStatus.local_committed, compare=False)
    sync_error: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Waypoint:
    lat: float
    lng: float
    address: str
    order: int
    lead_id: str | None = None
    notes: str | None = None
    completed: bool = False
    visit_duration: int | None = None  # minutes


@dataclass(frozen=True)
class RouteStats:
    total_distance: float  # miles
    total_duration: int  # minutes
    waypoint_count: int
    completed_count: int
    last_updated: datetime


@dataclass(frozen=True)
class Route:
    id: str
    user_id: str
    name: str
    created_at: datetime
    updated_at: datetime

    waypoints: tuple[Waypoint, ...]
    stats: RouteStats

    description: str = ""
    is_optimized: bool = False
    shared_with: tuple[str, ...] = ()
    is_public: bool = False
    tags: tuple[str, ...] = ()
    status: RouteStatus = RouteStatus.draft
    scheduled_date: datetime | None = None
    completed_date: datetime | None = None

    sync_status: SyncStatus = field(default=SyncStatus.local_committed, compare=False)
    sync_error: str | None = field(default=None, compare=False)
