# vdfd/entrypoints/api/routers/geocode.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..deps import get_geocoder, require_api_key
from ....schemas import ReverseGeocodeOut
from ....services.geocoding import ReverseGeocoder

router = APIRouter(tags=["geocode"], dependencies=[Depends(require_api_key)])


@router.get("/geocode/reverse", response_model=ReverseGeocodeOut)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    geocoder: ReverseGeocoder = Depends(get_geocoder),
) -> ReverseGeocodeOut:
    res = await geocoder.reverse(lat, lng)
    return ReverseGeocodeOut(lat=lat, lng=lng, address=res.address, resolved=res.resolved)
