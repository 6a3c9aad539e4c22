# vdfd/entrypoints/api/routers/health.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ..deps import get_settings, require_api_key
from ....config import Settings

router = APIRouter(tags=["health"])


def _mask(secret: str | None) -> str | None:
    if not secret:
        return secret
    return "***" if len(secret) <= 8 else f"{secret[:4]}***{secret[-4:]}"


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/debug/config", dependencies=[Depends(require_api_key)])
def debug_config(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """Effective runtime config with credentials masked."""
    return {
        "ENV": settings.ENV,
        "LOCAL_STORE_BACKEND": settings.LOCAL_STORE_BACKEND,
        "VDFD_DB_URL": settings.VDFD_DB_URL,
        "remote_sync_enabled": bool(settings.REMOTE_STORE_URL),
        "REMOTE_STORE_URL": settings.REMOTE_STORE_URL,
        "REMOTE_STORE_API_KEY": _mask(settings.REMOTE_STORE_API_KEY),
        "REMOTE_STORE_SECRET_SET": bool(settings.REMOTE_STORE_SECRET),
        "reverse_geocoding_enabled": bool(settings.GOOGLE_MAPS_API_KEY),
        "GOOGLE_MAPS_API_KEY": _mask(settings.GOOGLE_MAPS_API_KEY),
        "DEFAULT_AVERAGE_SPEED_MPH": settings.DEFAULT_AVERAGE_SPEED_MPH,
    }
