# vdfd/domain/filters.py
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from .clock import as_naive_utc
from .types import Lead, LeadStatus, PropertyType


@dataclass(frozen=True)
class LeadFilter:
    statuses: tuple[LeadStatus, ...] = ()
    property_types: tuple[PropertyType, ...] = ()
    priorities: tuple[int, ...] = ()
    min_distress_score: int | None = None
    max_distress_score: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # created_at is naive UTC, so the window must be too
        object.__setattr__(self, "start_date", as_naive_utc(self.start_date))
        object.__setattr__(self, "end_date", as_naive_utc(self.end_date))


def matches(lead: Lead, f: LeadFilter) -> bool:
    if f.statuses and lead.status not in f.statuses:
        return False
    if f.property_types and lead.property_type not in f.property_types:
        return False
    if f.priorities and lead.priority_rating not in f.priorities:
        return False
    if f.min_distress_score is not None and lead.distress_score < f.min_distress_score:
        return False
    if f.max_distress_score is not None and lead.distress_score > f.max_distress_score:
        return False
    if f.start_date is not None and lead.created_at < f.start_date:
        return False
    if f.end_date is not None and lead.created_at > f.end_date:
        return False
    # any-of match on tags
    if f.tags and not set(f.tags) & set(lead.tags):
        return False
    return True


def filter_leads(leads: Iterable[Lead], f: LeadFilter | None) -> list[Lead]:
    if f is None:
        return list(leads)
    return [lead for lead in leads if matches(lead, f)]


def lead_stats(leads: Iterable[Lead], *, now: datetime) -> dict:
    rows = list(leads)
    by_status = Counter(lead.status.value for lead in rows)
    by_type = Counter(lead.property_type.value for lead in rows)
    by_priority = Counter(lead.priority_rating for lead in rows)

    values = [lead.estimated_value for lead in rows if lead.estimated_value is not None]
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    return {
        "total": len(rows),
        "by_status": {s.value: by_status.get(s.value, 0) for s in LeadStatus},
        "by_property_type": {t.value: by_type.get(t.value, 0) for t in PropertyType},
        "by_priority": {p: by_priority.get(p, 0) for p in range(1, 6)},
        "average_distress_score": (sum(lead.distress_score for lead in rows) / len(rows)) if rows else 0.0,
        "total_value": float(sum(values)) if values else None,
        "this_week": sum(1 for lead in rows if lead.created_at >= week_ago),
        "this_month": sum(1 for lead in rows if lead.created_at >= month_ago),
    }
