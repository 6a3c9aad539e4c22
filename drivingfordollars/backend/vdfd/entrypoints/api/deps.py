# vdfd/entrypoints/api/deps.py
from __future__ import annotations

from fastapi import Header, HTTPException, Request

from ...config import Settings
from ...service_layer.sync import SyncReconciler
from ...services.geocoding import ReverseGeocoder


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_api_key(request: Request, x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    api_key = request.app.state.settings.API_KEY
    if api_key:
        if not x_api_key or x_api_key != api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")


def current_user_id(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    # identity is delegated to the external provider; we only need its opaque id
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id")
    return x_user_id.strip()


def get_reconciler(request: Request) -> SyncReconciler:
    return request.app.state.reconciler


def get_geocoder(request: Request) -> ReverseGeocoder:
    return request.app.state.geocoder
