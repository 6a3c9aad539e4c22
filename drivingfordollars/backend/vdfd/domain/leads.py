# vdfd/domain/leads.py
from __future__ import annotations

import uuid
from dataclasses import fields, replace
from datetime import datetime
from typing import Any

from .clock import as_naive_utc
from .distress import distress_score
from .types import DistressIndicators, Lead, LeadStatus, PropertyType, StreetViewPOV

# Never set by a caller: identity, creation time, derived score, sync metadata.
_PROTECTED_FIELDS = {"id", "user_id", "created_at", "distress_score", "sync_status", "sync_error"}
_MONEY_FIELDS = ("estimated_value", "arv", "repair_estimate", "max_offer")

_PRIORITY_LABELS: dict[int, str] = {
    1: "Very Low",
    2: "Low",
    3: "Medium",
    4: "High",
    5: "Very High",
}

_STATUS_LABELS: dict[LeadStatus, str] = {
    LeadStatus.new: "New Lead",
    LeadStatus.contacted: "Contacted",
    LeadStatus.qualified: "Qualified",
    LeadStatus.dead: "Dead Lead",
    LeadStatus.closed: "Closed Deal",
}


def new_lead_id() -> str:
    return f"lead_{uuid.uuid4().hex}"


def priority_label(rating: int) -> str:
    if rating not in _PRIORITY_LABELS:
        raise ValueError(f"priority_rating must be 1..5, got {rating}")
    return _PRIORITY_LABELS[rating]


def status_label(status: LeadStatus | str) -> str:
    return _STATUS_LABELS[LeadStatus(status)]


def _dedupe(values: Any) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for v in values or ():
        s = str(v).strip()
        if s:
            seen.setdefault(s, None)
    return tuple(seen)


def _coerce(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize container/enum shapes so the frozen record stays hashable and typed."""
    out = dict(data)
    if "pov" in out and not isinstance(out["pov"], StreetViewPOV):
        out["pov"] = StreetViewPOV(**out["pov"])
    if "indicators" in out and not isinstance(out["indicators"], DistressIndicators):
        ind = dict(out["indicators"])
        ind["other"] = tuple(ind.get("other") or ())
        out["indicators"] = DistressIndicators(**ind)
    if "property_type" in out:
        out["property_type"] = PropertyType(out["property_type"])
    if "status" in out:
        out["status"] = LeadStatus(out["status"])
    if "tags" in out:
        out["tags"] = _dedupe(out["tags"])
    if "shared_with" in out:
        out["shared_with"] = _dedupe(out["shared_with"])
    if "screenshots" in out:
        out["screenshots"] = tuple(out["screenshots"] or ())
    if "last_contact_date" in out:
        out["last_contact_date"] = as_naive_utc(out["last_contact_date"])
    return out


def validate_lead(lead: Lead) -> Lead:
    if not lead.id:
        raise ValueError("lead id is required")
    if not lead.user_id:
        raise ValueError("user_id is required")
    if not -90.0 <= lead.lat <= 90.0:
        raise ValueError(f"lat out of range [-90,90]: {lead.lat}")
    if not -180.0 <= lead.lng <= 180.0:
        raise ValueError(f"lng out of range [-180,180]: {lead.lng}")
    if lead.priority_rating not in _PRIORITY_LABELS:
        raise ValueError(f"priority_rating must be 1..5, got {lead.priority_rating}")
    for name in _MONEY_FIELDS:
        v = getattr(lead, name)
        if v is not None and v < 0:
            raise ValueError(f"{name} must be >= 0, got {v}")
    if lead.distress_score != distress_score(lead.indicators):
        raise ValueError("distress_score does not match indicators")
    return lead


def new_lead(
    user_id: str,
    draft: dict[str, Any],
    *,
    now: datetime,
    lead_id: str | None = None,
) -> Lead:
    """
    Assemble a new Lead at tagging time.

    `draft` carries user-entered fields (snake_case Lead field names). The
    distress score is always derived from the indicators, never taken from input.
    """
    data = _coerce(draft)

    unknown = set(data) - {f.name for f in fields(Lead)}
    if unknown:
        raise ValueError(f"Unknown lead fields: {sorted(unknown)}")
    protected = set(data) & (_PROTECTED_FIELDS | {"updated_at"})
    if protected:
        raise ValueError(f"Lead fields cannot be set on create: {sorted(protected)}")

    data.setdefault("pov", StreetViewPOV())
    data.setdefault("indicators", DistressIndicators())
    data.setdefault("property_type", PropertyType.sfh)

    lead = Lead(
        id=lead_id or new_lead_id(),
        user_id=user_id,
        created_at=now,
        updated_at=now,
        distress_score=distress_score(data["indicators"]),
        **data,
    )
    return validate_lead(lead)


def apply_lead_update(lead: Lead, changes: dict[str, Any], *, now: datetime) -> Lead:
    """Shallow field replacement; bumps updated_at and re-derives the score."""
    data = _coerce(changes)

    unknown = set(data) - {f.name for f in fields(Lead)}
    if unknown:
        raise ValueError(f"Unknown lead fields: {sorted(unknown)}")
    protected = set(data) & _PROTECTED_FIELDS
    if protected:
        raise ValueError(f"Lead fields cannot be updated: {sorted(protected)}")
    data.pop("updated_at", None)

    indicators = data.get("indicators", lead.indicators)
    updated = replace(
        lead,
        **data,
        distress_score=distress_score(indicators),
        updated_at=now,
    )
    return validate_lead(updated)
