# tests/test_local_store.py
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from vdfd.adapters.local_store import InMemoryLocalStore, SqlAlchemyLocalStore
from vdfd.domain.leads import new_lead
from vdfd.domain.routes import new_route
from vdfd.domain.types import SyncStatus, Waypoint

from conftest import T0


@pytest.fixture(params=["sqlalchemy", "memory"])
def store(request, async_session_maker):
    if request.param == "memory":
        return InMemoryLocalStore()
    return SqlAlchemyLocalStore(async_session_maker)


def _lead(user_id="u1", *, now=T0, **draft):
    draft.setdefault("address", "44 Elm St")
    draft.setdefault("lat", 42.5)
    draft.setdefault("lng", -83.25)
    return new_lead(user_id, draft, now=now)


async def test_lead_roundtrip_is_exact(store):
    lead = _lead(
        pov={"heading": 182.5, "pitch": -4.25, "zoom": 1.5},
        indicators={"roof_damage": True, "other": ["burn marks"]},
        notes="tall grass, mail piling up",
        priority_rating=5,
        screenshots=["shots/a.png"],
        tags=["probate"],
        estimated_value=185000.0,
        last_contact_date=T0 - timedelta(days=2),
        owner_name="J. Smith",
    )
    await store.put_lead(lead)

    got = await store.get_lead(lead.id)
    assert got == lead
    assert got.sync_status == SyncStatus.local_committed


async def test_get_missing_lead_returns_none(store):
    assert await store.get_lead("lead_nope") is None


async def test_list_leads_is_per_user_newest_first(store):
    old = _lead(now=T0)
    new = _lead(now=T0 + timedelta(hours=1))
    other = _lead("u2")
    for lead in (old, new, other):
        await store.put_lead(lead)

    assert [lead.id for lead in await store.list_leads("u1")] == [new.id, old.id]
    assert [lead.id for lead in await store.list_leads("u2")] == [other.id]
    assert await store.list_leads("u3") == []


async def test_put_replaces_whole_record(store):
    lead = _lead(notes="first")
    await store.put_lead(lead)
    await store.put_lead(replace(lead, notes="second"))

    got = await store.get_lead(lead.id)
    assert got.notes == "second"
    assert len(await store.list_leads("u1")) == 1


async def test_delete_lead(store):
    lead = _lead()
    await store.put_lead(lead)

    assert await store.delete_lead(lead.id) is True
    assert await store.get_lead(lead.id) is None
    assert await store.delete_lead(lead.id) is False


async def test_sync_marks_drive_unsynced_listing(store):
    a = _lead(now=T0)
    b = _lead(now=T0 + timedelta(seconds=5))
    await store.put_lead(a)
    await store.put_lead(b)

    await store.mark_lead_sync(a.id, SyncStatus.remote_synced, error=None, at=T0)
    await store.mark_lead_sync(b.id, SyncStatus.remote_sync_failed, error="HTTP 500: boom", at=T0)

    unsynced = await store.list_unsynced_leads("u1")
    assert [lead.id for lead in unsynced] == [b.id]
    assert unsynced[0].sync_status == SyncStatus.remote_sync_failed
    assert unsynced[0].sync_error == "HTTP 500: boom"
    assert (await store.get_lead(a.id)).sync_status == SyncStatus.remote_synced


async def test_route_roundtrip_is_exact(store):
    route = new_route(
        "u1",
        {
            "name": "Tuesday run",
            "description": "north side",
            "waypoints": [
                Waypoint(lat=42.1, lng=-83.1, address="1 A St", order=1, lead_id="lead_a"),
                Waypoint(lat=42.2, lng=-83.3, address="2 B St", order=2, notes="gate", visit_duration=5),
                Waypoint(lat=42.15, lng=-83.2, address="3 C St", order=3, completed=True),
            ],
            "tags": ["weekly"],
            "scheduled_date": T0 + timedelta(days=1),
        },
        now=T0,
    )
    await store.put_route(route)

    got = await store.get_route(route.id)
    assert got == route
    assert got.stats == route.stats
    assert [w.order for w in got.waypoints] == [1, 2, 3]


async def test_routes_listing_and_delete(store):
    r1 = new_route("u1", {"name": "one"}, now=T0)
    r2 = new_route("u1", {"name": "two"}, now=T0 + timedelta(minutes=1))
    r3 = new_route("u2", {"name": "three"}, now=T0)
    for r in (r1, r2, r3):
        await store.put_route(r)

    assert [r.name for r in await store.list_routes("u1")] == ["two", "one"]

    await store.mark_route_sync(r1.id, SyncStatus.remote_synced, error=None, at=T0)
    assert [r.id for r in await store.list_unsynced_routes("u1")] == [r2.id]

    assert await store.delete_route(r2.id) is True
    assert [r.name for r in await store.list_routes("u1")] == ["one"]


async def test_offset_aware_dates_read_back_identically(store):
    plus5 = timezone(timedelta(hours=5))
    lead = _lead(last_contact_date=datetime(2024, 1, 1, 15, 0, tzinfo=plus5))
    await store.put_lead(lead)

    back = await store.get_lead(lead.id)
    assert back == lead
    assert back.last_contact_date == datetime(2024, 1, 1, 10, 0)

    route = new_route(
        "u1",
        {"name": "dawn run", "scheduled_date": datetime(2024, 6, 1, 6, 0, tzinfo=plus5)},
        now=T0,
    )
    await store.put_route(route)

    got = await store.get_route(route.id)
    assert got == route
    assert got.scheduled_date == datetime(2024, 6, 1, 1, 0)
