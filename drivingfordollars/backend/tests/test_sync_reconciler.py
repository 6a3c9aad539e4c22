# tests/test_sync_reconciler.py
import logging

import pytest

from vdfd.adapters.local_store import InMemoryLocalStore, LocalStoreError
from vdfd.domain.types import Lead, SyncStatus
from vdfd.integrations.base import DisabledRemoteStore
from vdfd.service_layer.sync import (
    LEADS_COLLECTION,
    ROUTES_COLLECTION,
    LeadNotFound,
    RouteNotFound,
    SyncReconciler,
)

from conftest import FailingRemote, RaisingRemote, RecordingRemote, TickClock

DRAFT = {
    "address": "9 Oak Ave, Pontiac, MI",
    "lat": 42.6389,
    "lng": -83.291,
    "indicators": {"overgrown_lawn": True, "boarded_windows": True},
    "notes": "vacant?",
}


class BrokenStore(InMemoryLocalStore):
    async def put_lead(self, lead: Lead) -> Lead:
        raise LocalStoreError("disk full")


async def test_create_commits_locally_then_mirrors(reconciler, recording_remote, sql_store):
    res = await reconciler.create_lead("u1", DRAFT)

    assert res.remote.ok is True
    assert res.local.distress_score == 29
    assert res.local.sync_status == SyncStatus.remote_synced

    kind, collection, doc_id, doc = recording_remote.calls[0]
    assert (kind, collection, doc_id) == ("upsert", LEADS_COLLECTION, res.local.id)
    assert doc["id"] == res.local.id
    assert doc["distress_score"] == 29
    assert "sync_status" not in doc

    stored = await sql_store.get_lead(res.local.id)
    assert stored == res.local
    assert stored.sync_status == SyncStatus.remote_synced


async def test_remote_failure_never_fails_the_write(sql_store, failing_remote, clock, caplog):
    reconciler = SyncReconciler(sql_store, failing_remote, clock=clock)

    with caplog.at_level(logging.WARNING):
        res = await reconciler.create_lead("u1", DRAFT)

    assert res.remote.ok is False
    assert res.remote.error == "HTTP 503: unavailable"
    assert failing_remote.attempts == 1

    stored = await sql_store.get_lead(res.local.id)
    assert stored is not None
    assert stored.sync_status == SyncStatus.remote_sync_failed
    assert stored.sync_error == "HTTP 503: unavailable"
    assert [lead.id for lead in await reconciler.list_leads("u1")] == [res.local.id]
    assert "remote sync failed" in caplog.text


async def test_remote_exception_is_contained(sql_store, clock):
    reconciler = SyncReconciler(sql_store, RaisingRemote(), clock=clock)

    res = await reconciler.create_lead("u1", DRAFT)

    assert res.remote.ok is False
    assert "ConnectionError" in res.remote.error
    assert (await sql_store.get_lead(res.local.id)).sync_status == SyncStatus.remote_sync_failed


async def test_unconfigured_remote_is_skipped(memory_store, clock):
    reconciler = SyncReconciler(memory_store, DisabledRemoteStore(), clock=clock)

    res = await reconciler.create_lead("u1", DRAFT)

    assert res.remote.skipped is True
    stored = await memory_store.get_lead(res.local.id)
    assert stored.sync_status == SyncStatus.local_committed
    assert stored.sync_error is None


async def test_local_failure_propagates_and_nothing_is_pushed(recording_remote, clock):
    reconciler = SyncReconciler(BrokenStore(), recording_remote, clock=clock)

    with pytest.raises(LocalStoreError):
        await reconciler.create_lead("u1", DRAFT)
    assert recording_remote.calls == []


async def test_reads_never_touch_the_remote(reconciler, recording_remote):
    created = (await reconciler.create_lead("u1", DRAFT)).local
    calls = len(recording_remote.calls)

    assert (await reconciler.get_lead("u1", created.id)).id == created.id
    assert len(await reconciler.list_leads("u1")) == 1
    assert len(recording_remote.calls) == calls


async def test_other_users_leads_are_not_found(reconciler):
    created = (await reconciler.create_lead("u1", DRAFT)).local

    with pytest.raises(LeadNotFound):
        await reconciler.get_lead("u2", created.id)
    with pytest.raises(LeadNotFound):
        await reconciler.update_lead("u2", created.id, {"notes": "mine now"})
    with pytest.raises(LeadNotFound):
        await reconciler.delete_lead("u2", created.id)


async def test_update_rescores_and_resyncs(reconciler, recording_remote):
    created = (await reconciler.create_lead("u1", DRAFT)).local

    res = await reconciler.update_lead("u1", created.id, {"indicators": {"roof_damage": True}, "status": "contacted"})

    assert res.local.distress_score == 14
    assert res.local.updated_at > created.updated_at
    assert res.local.created_at == created.created_at
    assert res.local.sync_status == SyncStatus.remote_synced
    assert recording_remote.calls[-1][0] == "upsert"
    assert recording_remote.calls[-1][3]["status"] == "contacted"


async def test_delete_removes_locally_even_when_remote_fails(sql_store, clock):
    reconciler = SyncReconciler(sql_store, FailingRemote(), clock=clock)
    created = (await reconciler.create_lead("u1", DRAFT)).local

    res = await reconciler.delete_lead("u1", created.id)

    assert res.local is True
    assert res.remote.ok is False
    assert await sql_store.get_lead(created.id) is None
    with pytest.raises(LeadNotFound):
        await reconciler.get_lead("u1", created.id)


async def test_push_unsynced_catches_up_after_reconnect(sql_store, clock):
    offline = SyncReconciler(sql_store, FailingRemote(), clock=clock)
    lead = (await offline.create_lead("u1", DRAFT)).local
    route = (await offline.create_route("u1", {"name": "loop"})).local

    online_remote = RecordingRemote()
    online = SyncReconciler(sql_store, online_remote, clock=clock)
    summary = await online.push_unsynced("u1")

    assert (summary.attempted, summary.synced, summary.failed, summary.skipped) == (2, 2, 0, 0)
    assert {(c[1], c[2]) for c in online_remote.calls} == {
        (LEADS_COLLECTION, lead.id),
        (ROUTES_COLLECTION, route.id),
    }
    assert (await sql_store.get_lead(lead.id)).sync_status == SyncStatus.remote_synced
    assert (await sql_store.get_route(route.id)).sync_status == SyncStatus.remote_synced

    again = await online.push_unsynced("u1")
    assert again.attempted == 0


async def test_route_from_leads_orders_by_nearest_neighbour(reconciler, recording_remote):
    a = (await reconciler.create_lead("u1", {**DRAFT, "lat": 42.0, "lng": -83.0})).local
    far = (await reconciler.create_lead("u1", {**DRAFT, "lat": 42.0, "lng": -83.2})).local
    near = (await reconciler.create_lead("u1", {**DRAFT, "lat": 42.0, "lng": -83.1})).local

    res = await reconciler.create_route_from_leads("u1", "Saturday", [a.id, far.id, near.id])
    route = res.local

    assert route.is_optimized is True
    assert [w.lead_id for w in route.waypoints] == [a.id, near.id, far.id]
    assert [w.order for w in route.waypoints] == [1, 2, 3]
    assert route.stats.waypoint_count == 3
    assert route.sync_status == SyncStatus.remote_synced
    assert recording_remote.calls[-1][:2] == ("upsert", ROUTES_COLLECTION)


async def test_route_from_unknown_lead_is_not_found(reconciler):
    with pytest.raises(LeadNotFound):
        await reconciler.create_route_from_leads("u1", "x", ["lead_missing"])


async def test_route_update_and_delete(reconciler, recording_remote):
    route = (await reconciler.create_route("u1", {"name": "draft"})).local

    updated = (await reconciler.update_route("u1", route.id, {"name": "final", "status": "planned"})).local
    assert updated.name == "final"
    assert updated.status.value == "planned"

    with pytest.raises(RouteNotFound):
        await reconciler.get_route("u2", route.id)

    res = await reconciler.delete_route("u1", route.id)
    assert res.local is True
    assert recording_remote.calls[-1] == ("delete", ROUTES_COLLECTION, route.id, None)
    assert await reconciler.list_routes("u1") == []


async def test_clock_drives_timestamps(memory_store):
    clock = TickClock()
    reconciler = SyncReconciler(memory_store, DisabledRemoteStore(), clock=clock)
    first = (await reconciler.create_lead("u1", DRAFT)).local
    second = (await reconciler.create_lead("u1", DRAFT)).local

    assert second.created_at > first.created_at
    assert [lead.id for lead in await reconciler.list_leads("u1")] == [second.id, first.id]
