# vdfd/models.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .domain.types import LeadStatus, PropertyType, RouteStatus, SyncStatus


class Base(DeclarativeBase):
    pass


# -----------------------------
# Local-first store tables
# -----------------------------
class LeadRow(Base):
    """
    One tagged property. Keys: id; secondary lookups by
    (user_id, created_at, status, priority_rating).
    """
    __tablename__ = "leads"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime)

    address: Mapped[str] = mapped_column(String(255), default="")
    lat: Mapped[float] = mapped_column(Float)
    lng: Mapped[float] = mapped_column(Float)
    # {"heading": .., "pitch": .., "zoom": ..}
    pov_json: Mapped[str] = mapped_column(Text, default="{}")

    property_type: Mapped[PropertyType] = mapped_column(Enum(PropertyType))
    estimated_value: Mapped[float | None] = mapped_column(Float, nullable=True)

    distress_score: Mapped[int] = mapped_column(Integer, default=0)
    indicators_json: Mapped[str] = mapped_column(Text, default="{}")

    notes: Mapped[str] = mapped_column(Text, default="")
    priority_rating: Mapped[int] = mapped_column(Integer, default=3, index=True)
    screenshots_json: Mapped[str] = mapped_column(Text, default="[]")
    tags_json: Mapped[str] = mapped_column(Text, default="[]")

    status: Mapped[LeadStatus] = mapped_column(Enum(LeadStatus), default=LeadStatus.new, index=True)
    claimed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    shared_with_json: Mapped[str] = mapped_column(Text, default="[]")

    owner_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    owner_phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    owner_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_contact_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    arv: Mapped[float | None] = mapped_column(Float, nullable=True)
    repair_estimate: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_offer: Mapped[float | None] = mapped_column(Float, nullable=True)

    # remote mirror bookkeeping
    sync_status: Mapped[SyncStatus] = mapped_column(
        Enum(SyncStatus), default=SyncStatus.local_committed, index=True
    )
    sync_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    synced_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class RouteRow(Base):
    __tablename__ = "routes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True)

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime)

    # ordered list of waypoint dicts
    waypoints_json: Mapped[str] = mapped_column(Text, default="[]")
    stats_json: Mapped[str] = mapped_column(Text, default="{}")

    is_optimized: Mapped[bool] = mapped_column(Boolean, default=False)
    shared_with_json: Mapped[str] = mapped_column(Text, default="[]")
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    tags_json: Mapped[str] = mapped_column(Text, default="[]")

    status: Mapped[RouteStatus] = mapped_column(Enum(RouteStatus), default=RouteStatus.draft)
    scheduled_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    sync_status: Mapped[SyncStatus] = mapped_column(
        Enum(SyncStatus), default=SyncStatus.local_committed, index=True
    )
    sync_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    synced_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
