# vdfd/service_layer/sync.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Awaitable, Callable, Generic, Sequence, TypeVar

from ..adapters.local_store import LocalStore, LocalStoreError
from ..domain.clock import utcnow
from ..domain.filters import LeadFilter, filter_leads
from ..domain.leads import apply_lead_update, new_lead
from ..domain.routes import (
    DEFAULT_AVERAGE_SPEED_MPH,
    apply_route_update,
    new_route,
    waypoint_from_lead,
)
from ..domain.types import Coordinate, Lead, Route, SyncStatus
from ..integrations.base import RemoteResult, RemoteStore
from ..schemas import lead_document, route_document

log = logging.getLogger(__name__)

LEADS_COLLECTION = "leads"
ROUTES_COLLECTION = "routes"

T = TypeVar("T")


class NotFoundError(LookupError):
    pass


class LeadNotFound(NotFoundError):
    pass


class RouteNotFound(NotFoundError):
    pass


@dataclass(frozen=True)
class WriteResult(Generic[T]):
    """Local outcome and remote outcome of one write, observable independently."""

    local: T
    remote: RemoteResult


@dataclass(frozen=True)
class PushSummary:
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    skipped: int = 0


def _sync_state_for(res: RemoteResult) -> tuple[SyncStatus, str | None]:
    if res.skipped:
        return SyncStatus.local_committed, None
    if res.ok:
        return SyncStatus.remote_synced, None
    return SyncStatus.remote_sync_failed, res.error


class SyncReconciler:
    """
    Local-first writes with a best-effort remote mirror.

    Every write commits to the local store first; a LocalStoreError propagates
    and nothing is pushed. The remote push is awaited right after, and its
    failure is logged and recorded on the local row, never raised and never
    retried here. Reads only ever touch the local store.
    """

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteStore,
        *,
        clock: Callable[[], datetime] = utcnow,
        average_speed: float = DEFAULT_AVERAGE_SPEED_MPH,
    ) -> None:
        self.store = store
        self.remote = remote
        self.clock = clock
        self.average_speed = average_speed

    # -----------------------------
    # remote plumbing
    # -----------------------------
    async def _push(self, what: str, call: Callable[[], Awaitable[RemoteResult]]) -> RemoteResult:
        try:
            res = await call()
        except Exception as e:  # third-party RemoteStore implementations may raise
            res = RemoteResult(ok=False, error=f"{type(e).__name__}: {e}")

        if not res.ok and not res.skipped:
            log.warning("remote sync failed for %s: %s", what, res.error)
        return res

    async def _mirror_lead(self, lead: Lead) -> tuple[Lead, RemoteResult]:
        res = await self._push(
            f"lead {lead.id}",
            lambda: self.remote.upsert(LEADS_COLLECTION, lead.id, lead_document(lead)),
        )
        status, error = _sync_state_for(res)
        if status != lead.sync_status or error != lead.sync_error:
            try:
                await self.store.mark_lead_sync(lead.id, status, error=error, at=self.clock())
            except LocalStoreError:
                log.exception("could not record sync state for lead %s", lead.id)
        return replace(lead, sync_status=status, sync_error=error), res

    async def _mirror_route(self, route: Route) -> tuple[Route, RemoteResult]:
        res = await self._push(
            f"route {route.id}",
            lambda: self.remote.upsert(ROUTES_COLLECTION, route.id, route_document(route)),
        )
        status, error = _sync_state_for(res)
        if status != route.sync_status or error != route.sync_error:
            try:
                await self.store.mark_route_sync(route.id, status, error=error, at=self.clock())
            except LocalStoreError:
                log.exception("could not record sync state for route %s", route.id)
        return replace(route, sync_status=status, sync_error=error), res

    # -----------------------------
    # leads
    # -----------------------------
    async def get_lead(self, user_id: str, lead_id: str) -> Lead:
        lead = await self.store.get_lead(lead_id)
        if lead is None or lead.user_id != user_id:
            raise LeadNotFound(lead_id)
        return lead

    async def list_leads(self, user_id: str, lead_filter: LeadFilter | None = None) -> list[Lead]:
        return filter_leads(await self.store.list_leads(user_id), lead_filter)

    async def create_lead(self, user_id: str, draft: dict[str, Any]) -> WriteResult[Lead]:
        lead = new_lead(user_id, draft, now=self.clock())
        committed = await self.store.put_lead(lead)
        log.info("lead %s committed locally for user %s", committed.id, user_id)

        synced, res = await self._mirror_lead(committed)
        return WriteResult(local=synced, remote=res)

    async def update_lead(self, user_id: str, lead_id: str, changes: dict[str, Any]) -> WriteResult[Lead]:
        current = await self.get_lead(user_id, lead_id)
        updated = apply_lead_update(current, changes, now=self.clock())
        updated = replace(updated, sync_status=SyncStatus.local_committed, sync_error=None)
        committed = await self.store.put_lead(updated)

        synced, res = await self._mirror_lead(committed)
        return WriteResult(local=synced, remote=res)

    async def delete_lead(self, user_id: str, lead_id: str) -> WriteResult[bool]:
        await self.get_lead(user_id, lead_id)
        deleted = await self.store.delete_lead(lead_id)
        log.info("lead %s deleted locally", lead_id)

        res = await self._push(f"lead {lead_id} (delete)", lambda: self.remote.delete(LEADS_COLLECTION, lead_id))
        return WriteResult(local=deleted, remote=res)

    # -----------------------------
    # routes
    # -----------------------------
    async def get_route(self, user_id: str, route_id: str) -> Route:
        route = await self.store.get_route(route_id)
        if route is None or route.user_id != user_id:
            raise RouteNotFound(route_id)
        return route

    async def list_routes(self, user_id: str) -> list[Route]:
        return await self.store.list_routes(user_id)

    async def _commit_route(self, route: Route) -> WriteResult[Route]:
        committed = await self.store.put_route(route)
        synced, res = await self._mirror_route(committed)
        return WriteResult(local=synced, remote=res)

    async def create_route(
        self,
        user_id: str,
        draft: dict[str, Any],
        *,
        optimize: bool = False,
        start_point: Coordinate | None = None,
    ) -> WriteResult[Route]:
        route = new_route(
            user_id,
            draft,
            now=self.clock(),
            optimize=optimize,
            start_point=start_point,
            average_speed=self.average_speed,
        )
        return await self._commit_route(route)

    async def create_route_from_leads(
        self,
        user_id: str,
        name: str,
        lead_ids: Sequence[str],
        *,
        optimize: bool = True,
        start_point: Coordinate | None = None,
    ) -> WriteResult[Route]:
        leads = [await self.get_lead(user_id, lead_id) for lead_id in lead_ids]
        waypoints = [waypoint_from_lead(lead, i + 1) for i, lead in enumerate(leads)]
        return await self.create_route(
            user_id,
            {"name": name, "waypoints": waypoints},
            optimize=optimize,
            start_point=start_point,
        )

    async def update_route(
        self,
        user_id: str,
        route_id: str,
        changes: dict[str, Any],
        *,
        optimize: bool = False,
        start_point: Coordinate | None = None,
    ) -> WriteResult[Route]:
        current = await self.get_route(user_id, route_id)
        updated = apply_route_update(
            current,
            changes,
            now=self.clock(),
            optimize=optimize,
            start_point=start_point,
            average_speed=self.average_speed,
        )
        updated = replace(updated, sync_status=SyncStatus.local_committed, sync_error=None)
        return await self._commit_route(updated)

    async def delete_route(self, user_id: str, route_id: str) -> WriteResult[bool]:
        await self.get_route(user_id, route_id)
        deleted = await self.store.delete_route(route_id)
        res = await self._push(f"route {route_id} (delete)", lambda: self.remote.delete(ROUTES_COLLECTION, route_id))
        return WriteResult(local=deleted, remote=res)

    # -----------------------------
    # explicit catch-up pass
    # -----------------------------
    async def push_unsynced(self, user_id: str) -> PushSummary:
        """
        Push every local record of `user_id` not yet mirrored. Runs only when a
        caller asks for it (e.g. on reconnect); nothing schedules it.
        """
        attempted = synced = failed = skipped = 0

        records: list[Lead | Route] = [
            *await self.store.list_unsynced_leads(user_id),
            *await self.store.list_unsynced_routes(user_id),
        ]
        for rec in records:
            attempted += 1
            if isinstance(rec, Lead):
                _, res = await self._mirror_lead(rec)
            else:
                _, res = await self._mirror_route(rec)

            if res.skipped:
                skipped += 1
            elif res.ok:
                synced += 1
            else:
                failed += 1

        log.info(
            "push_unsynced user=%s attempted=%d synced=%d failed=%d skipped=%d",
            user_id, attempted, synced, failed, skipped,
        )
        return PushSummary(attempted=attempted, synced=synced, failed=failed, skipped=skipped)
