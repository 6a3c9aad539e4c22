# vdfd/domain/clock.py
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, which is what SQLite DateTime columns hand back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(dt: datetime | None) -> datetime | None:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
