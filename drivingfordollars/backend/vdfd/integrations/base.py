# vdfd/integrations/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class RemoteResult:
    ok: bool
    error: str | None = None
    # True when no remote store is configured and nothing was attempted
    skipped: bool = False


class RemoteStore(Protocol):
    async def upsert(self, collection: str, doc_id: str, document: dict[str, Any]) -> RemoteResult:
        ...

    async def delete(self, collection: str, doc_id: str) -> RemoteResult:
        ...


class DisabledRemoteStore:
    """Quiet by default: used when no REMOTE_STORE_URL is configured."""

    async def upsert(self, collection: str, doc_id: str, document: dict[str, Any]) -> RemoteResult:
        return RemoteResult(ok=False, error="remote store not configured", skipped=True)

    async def delete(self, collection: str, doc_id: str) -> RemoteResult:
        return RemoteResult(ok=False, error="remote store not configured", skipped=True)
