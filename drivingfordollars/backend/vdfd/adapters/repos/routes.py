# vdfd/adapters/repos/routes.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.types import Route, SyncStatus
from ...models import RouteRow
from ..mappers import route_from_row, route_to_row_fields


class RouteRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, route_id: str) -> RouteRow | None:
        q = select(RouteRow).where(RouteRow.id == route_id)
        return (await self.session.execute(q)).scalars().first()

    async def put(self, route: Route) -> Route:
        row = await self._row(route.id)
        values = route_to_row_fields(route)
        if row is None:
            row = RouteRow(**values)
            self.session.add(row)
        else:
            for k, v in values.items():
                setattr(row, k, v)
        await self.session.flush()
        return route_from_row(row)

    async def get(self, route_id: str) -> Route | None:
        row = await self._row(route_id)
        return route_from_row(row) if row is not None else None

    async def list_for_user(self, user_id: str) -> list[Route]:
        q = (
            select(RouteRow)
            .where(RouteRow.user_id == user_id)
            .order_by(RouteRow.created_at.desc(), RouteRow.id.asc())
        )
        return [route_from_row(r) for r in (await self.session.execute(q)).scalars().all()]

    async def list_unsynced(self, user_id: str) -> list[Route]:
        q = (
            select(RouteRow)
            .where(RouteRow.user_id == user_id)
            .where(RouteRow.sync_status != SyncStatus.remote_synced)
            .order_by(RouteRow.created_at.asc())
        )
        return [route_from_row(r) for r in (await self.session.execute(q)).scalars().all()]

    async def delete(self, route_id: str) -> bool:
        res = await self.session.execute(delete(RouteRow).where(RouteRow.id == route_id))
        return (res.rowcount or 0) > 0

    async def set_sync_state(
        self,
        route_id: str,
        status: SyncStatus,
        *,
        error: str | None,
        at: datetime,
    ) -> bool:
        row = await self._row(route_id)
        if row is None:
            return False
        row.sync_status = status
        row.sync_error = error
        if status == SyncStatus.remote_synced:
            row.synced_at = at
        await self.session.flush()
        return True
