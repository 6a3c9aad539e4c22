# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vdfd.adapters.local_store import InMemoryLocalStore, SqlAlchemyLocalStore
from vdfd.integrations.base import RemoteResult
from vdfd.models import Base
from vdfd.service_layer.sync import SyncReconciler

T0 = datetime(2024, 5, 1, 12, 0, 0)


class TickClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


class RecordingRemote:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str, dict[str, Any] | None]] = []

    async def upsert(self, collection: str, doc_id: str, document: dict[str, Any]) -> RemoteResult:
        self.calls.append(("upsert", collection, doc_id, document))
        return RemoteResult(ok=True)

    async def delete(self, collection: str, doc_id: str) -> RemoteResult:
        self.calls.append(("delete", collection, doc_id, None))
        return RemoteResult(ok=True)


class FailingRemote:
    def __init__(self, error: str = "HTTP 503: unavailable") -> None:
        self.error = error
        self.attempts = 0

    async def upsert(self, collection: str, doc_id: str, document: dict[str, Any]) -> RemoteResult:
        self.attempts += 1
        return RemoteResult(ok=False, error=self.error)

    async def delete(self, collection: str, doc_id: str) -> RemoteResult:
        self.attempts += 1
        return RemoteResult(ok=False, error=self.error)


class RaisingRemote:
    async def upsert(self, collection: str, doc_id: str, document: dict[str, Any]) -> RemoteResult:
        raise ConnectionError("network unreachable")

    async def delete(self, collection: str, doc_id: str) -> RemoteResult:
        raise ConnectionError("network unreachable")


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
def sql_store(async_session_maker):
    return SqlAlchemyLocalStore(async_session_maker)


@pytest.fixture
def memory_store():
    return InMemoryLocalStore()


@pytest.fixture
def clock():
    return TickClock()


@pytest.fixture
def recording_remote():
    return RecordingRemote()


@pytest.fixture
def failing_remote():
    return FailingRemote()


@pytest.fixture
def reconciler(sql_store, recording_remote, clock):
    return SyncReconciler(sql_store, recording_remote, clock=clock)
