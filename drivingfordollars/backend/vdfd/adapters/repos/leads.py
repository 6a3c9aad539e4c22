# vdfd/adapters/repos/leads.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.types import Lead, SyncStatus
from ...models import LeadRow
from ..mappers import lead_from_row, lead_to_row_fields


class LeadRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _row(self, lead_id: str) -> LeadRow | None:
        q = select(LeadRow).where(LeadRow.id == lead_id)
        return (await self.session.execute(q)).scalars().first()

    async def put(self, lead: Lead) -> Lead:
        """
        Whole-record upsert keyed by id.

        Sync metadata on the incoming record is written as-is; callers decide
        whether a write resets it to local_committed.
        """
        row = await self._row(lead.id)
        values = lead_to_row_fields(lead)
        if row is None:
            row = LeadRow(**values)
            self.session.add(row)
        else:
            for k, v in values.items():
                setattr(row, k, v)

        await self.session.flush()
        return lead_from_row(row)

    async def get(self, lead_id: str) -> Lead | None:
        row = await self._row(lead_id)
        return lead_from_row(row) if row is not None else None

    async def list_for_user(self, user_id: str) -> list[Lead]:
        q = (
            select(LeadRow)
            .where(LeadRow.user_id == user_id)
            .order_by(LeadRow.created_at.desc(), LeadRow.id.asc())
        )
        rows = (await self.session.execute(q)).scalars().all()
        return [lead_from_row(r) for r in rows]

    async def list_unsynced(self, user_id: str) -> list[Lead]:
        q = (
            select(LeadRow)
            .where(LeadRow.user_id == user_id)
            .where(LeadRow.sync_status != SyncStatus.remote_synced)
            .order_by(LeadRow.created_at.asc())
        )
        rows = (await self.session.execute(q)).scalars().all()
        return [lead_from_row(r) for r in rows]

    async def delete(self, lead_id: str) -> bool:
        res = await self.session.execute(delete(LeadRow).where(LeadRow.id == lead_id))
        return (res.rowcount or 0) > 0

    async def set_sync_state(
        self,
        lead_id: str,
        status: SyncStatus,
        *,
        error: str | None,
        at: datetime,
    ) -> bool:
        row = await self._row(lead_id)
        if row is None:
            return False
        row.sync_status = status
        row.sync_error = error
        if status == SyncStatus.remote_synced:
            row.synced_at = at
        await self.session.flush()
        return True
