# vdfd/entrypoints/api/routers/sync.py
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from ..deps import current_user_id, get_reconciler, require_api_key
from ....schemas import SyncPushOut
from ....service_layer.sync import SyncReconciler

router = APIRouter(tags=["sync"], dependencies=[Depends(require_api_key)])


@router.post("/sync/push", response_model=SyncPushOut)
async def push_unsynced(
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> SyncPushOut:
    """Client calls this on reconnect; the server never runs it on its own."""
    summary = await reconciler.push_unsynced(user_id)
    return SyncPushOut(**asdict(summary))
