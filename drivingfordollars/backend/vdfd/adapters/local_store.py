# vdfd/adapters/local_store.py
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..domain.types import Lead, Route, SyncStatus
from ..service_layer.unit_of_work import SqlAlchemyUnitOfWork


class LocalStoreError(RuntimeError):
    """A local write did not commit. Fatal to the operation that issued it."""


class LocalStore(Protocol):
    """
    On-device durable store. Source of truth for every read; partitioned by user_id.
    A write has committed once the awaited call returns without raising.
    """

    async def put_lead(self, lead: Lead) -> Lead: ...
    async def get_lead(self, lead_id: str) -> Lead | None: ...
    async def list_leads(self, user_id: str) -> list[Lead]: ...
    async def list_unsynced_leads(self, user_id: str) -> list[Lead]: ...
    async def delete_lead(self, lead_id: str) -> bool: ...
    async def mark_lead_sync(self, lead_id: str, status: SyncStatus, *, error: str | None, at: datetime) -> None: ...

    async def put_route(self, route: Route) -> Route: ...
    async def get_route(self, route_id: str) -> Route | None: ...
    async def list_routes(self, user_id: str) -> list[Route]: ...
    async def list_unsynced_routes(self, user_id: str) -> list[Route]: ...
    async def delete_route(self, route_id: str) -> bool: ...
    async def mark_route_sync(self, route_id: str, status: SyncStatus, *, error: str | None, at: datetime) -> None: ...


class SqlAlchemyLocalStore:
    """LocalStore over an async SQLAlchemy session factory; one unit of work per call."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker

    def _uow(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self.session_maker)

    # ----- leads -----
    async def put_lead(self, lead: Lead) -> Lead:
        try:
            async with self._uow() as uow:
                return await uow.leads.put(lead)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"failed to write lead {lead.id}: {e}") from e

    async def get_lead(self, lead_id: str) -> Lead | None:
        async with self._uow() as uow:
            return await uow.leads.get(lead_id)

    async def list_leads(self, user_id: str) -> list[Lead]:
        async with self._uow() as uow:
            return await uow.leads.list_for_user(user_id)

    async def list_unsynced_leads(self, user_id: str) -> list[Lead]:
        async with self._uow() as uow:
            return await uow.leads.list_unsynced(user_id)

    async def delete_lead(self, lead_id: str) -> bool:
        try:
            async with self._uow() as uow:
                return await uow.leads.delete(lead_id)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"failed to delete lead {lead_id}: {e}") from e

    async def mark_lead_sync(self, lead_id: str, status: SyncStatus, *, error: str | None, at: datetime) -> None:
        try:
            async with self._uow() as uow:
                await uow.leads.set_sync_state(lead_id, status, error=error, at=at)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"failed to record sync state for lead {lead_id}: {e}") from e

    # ----- routes -----
    async def put_route(self, route: Route) -> Route:
        try:
            async with self._uow() as uow:
                return await uow.routes.put(route)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"failed to write route {route.id}: {e}") from e

    async def get_route(self, route_id: str) -> Route | None:
        async with self._uow() as uow:
            return await uow.routes.get(route_id)

    async def list_routes(self, user_id: str) -> list[Route]:
        async with self._uow() as uow:
            return await uow.routes.list_for_user(user_id)

    async def list_unsynced_routes(self, user_id: str) -> list[Route]:
        async with self._uow() as uow:
            return await uow.routes.list_unsynced(user_id)

    async def delete_route(self, route_id: str) -> bool:
        try:
            async with self._uow() as uow:
                return await uow.routes.delete(route_id)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"failed to delete route {route_id}: {e}") from e

    async def mark_route_sync(self, route_id: str, status: SyncStatus, *, error: str | None, at: datetime) -> None:
        try:
            async with self._uow() as uow:
                await uow.routes.set_sync_state(route_id, status, error=error, at=at)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"failed to record sync state for route {route_id}: {e}") from e


class InMemoryLocalStore:
    """Dict-backed LocalStore. Same contract, no database; used in tests and LOCAL_STORE_BACKEND=memory."""

    def __init__(self) -> None:
        self.leads: dict[str, Lead] = {}
        self.routes: dict[str, Route] = {}

    async def put_lead(self, lead: Lead) -> Lead:
        self.leads[lead.id] = lead
        return lead

    async def get_lead(self, lead_id: str) -> Lead | None:
        return self.leads.get(lead_id)

    async def list_leads(self, user_id: str) -> list[Lead]:
        rows = [lead for lead in self.leads.values() if lead.user_id == user_id]
        rows.sort(key=lambda lead: lead.id)
        rows.sort(key=lambda lead: lead.created_at, reverse=True)
        return rows

    async def list_unsynced_leads(self, user_id: str) -> list[Lead]:
        rows = [
            lead for lead in self.leads.values()
            if lead.user_id == user_id and lead.sync_status != SyncStatus.remote_synced
        ]
        return sorted(rows, key=lambda lead: lead.created_at)

    async def delete_lead(self, lead_id: str) -> bool:
        return self.leads.pop(lead_id, None) is not None

    async def mark_lead_sync(self, lead_id: str, status: SyncStatus, *, error: str | None, at: datetime) -> None:
        lead = self.leads.get(lead_id)
        if lead is not None:
            self.leads[lead_id] = replace(lead, sync_status=status, sync_error=error)

    async def put_route(self, route: Route) -> Route:
        self.routes[route.id] = route
        return route

    async def get_route(self, route_id: str) -> Route | None:
        return self.routes.get(route_id)

    async def list_routes(self, user_id: str) -> list[Route]:
        rows = [r for r in self.routes.values() if r.user_id == user_id]
        rows.sort(key=lambda r: r.id)
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows

    async def list_unsynced_routes(self, user_id: str) -> list[Route]:
        rows = [
            r for r in self.routes.values()
            if r.user_id == user_id and r.sync_status != SyncStatus.remote_synced
        ]
        return sorted(rows, key=lambda r: r.created_at)

    async def delete_route(self, route_id: str) -> bool:
        return self.routes.pop(route_id, None) is not None

    async def mark_route_sync(self, route_id: str, status: SyncStatus, *, error: str | None, at: datetime) -> None:
        route = self.routes.get(route_id)
        if route is not None:
            self.routes[route_id] = replace(route, sync_status=status, sync_error=error)
