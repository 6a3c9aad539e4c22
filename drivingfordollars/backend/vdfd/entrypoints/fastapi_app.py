# vdfd/entrypoints/fastapi_app.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..adapters.local_store import InMemoryLocalStore, LocalStore, LocalStoreError, SqlAlchemyLocalStore
from ..config import Settings
from ..db import build_engine, build_session_maker, create_schema
from ..domain.clock import utcnow
from ..integrations.base import DisabledRemoteStore, RemoteStore
from ..integrations.document_store import HttpDocumentStore
from ..logging_config import configure_logging
from ..service_layer.sync import NotFoundError, SyncReconciler
from ..services.geocoding import ReverseGeocoder
from .api.routers import exports, geocode, health, leads, routes, sync

log = logging.getLogger(__name__)


def build_remote(settings: Settings) -> RemoteStore:
    if not settings.REMOTE_STORE_URL:
        log.info("REMOTE_STORE_URL not set; remote sync disabled")
        return DisabledRemoteStore()
    return HttpDocumentStore(
        settings.REMOTE_STORE_URL,
        api_key=settings.REMOTE_STORE_API_KEY,
        secret=settings.REMOTE_STORE_SECRET,
        timeout_s=settings.REMOTE_TIMEOUT_S,
    )


def build_geocoder(settings: Settings) -> ReverseGeocoder:
    return ReverseGeocoder(
        settings.GEOCODER_URL,
        settings.GOOGLE_MAPS_API_KEY,
        timeout_s=settings.GEOCODER_TIMEOUT_S,
    )


def create_app(
    settings: Settings | None = None,
    *,
    store: LocalStore | None = None,
    remote: RemoteStore | None = None,
    geocoder: ReverseGeocoder | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Virtual Driving for Dollars")

    engine = None
    if store is None:
        backend = settings.LOCAL_STORE_BACKEND.lower()
        if backend == "memory":
            store = InMemoryLocalStore()
        elif backend == "sqlalchemy":
            engine = build_engine(settings.VDFD_DB_URL)
            store = SqlAlchemyLocalStore(build_session_maker(engine))
        else:
            raise ValueError(f"Unknown LOCAL_STORE_BACKEND: {settings.LOCAL_STORE_BACKEND}")

    app.state.settings = settings
    app.state.store = store
    app.state.reconciler = SyncReconciler(
        store,
        remote or build_remote(settings),
        clock=clock,
        average_speed=settings.DEFAULT_AVERAGE_SPEED_MPH,
    )
    app.state.geocoder = geocoder or build_geocoder(settings)

    if engine is not None:
        @app.on_event("startup")
        async def _startup() -> None:
            # Single place where local tables are created.
            await create_schema(engine)

        @app.on_event("shutdown")
        async def _shutdown() -> None:
            await engine.dispose()

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": f"Not found: {exc}"})

    @app.exception_handler(ValueError)
    async def _invalid(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(LocalStoreError)
    async def _local_store_failed(request: Request, exc: LocalStoreError) -> JSONResponse:
        log.error("local store write failed on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "local store write failed"})

    # Routers
    app.include_router(health.router)
    app.include_router(leads.router)
    app.include_router(routes.router)
    app.include_router(exports.router)
    app.include_router(geocode.router)
    app.include_router(sync.router)

    return app
