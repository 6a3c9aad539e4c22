# vdfd/entrypoints/api/routers/leads.py
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import current_user_id, get_geocoder, get_reconciler, require_api_key
from ....domain.clock import utcnow
from ....domain.filters import LeadFilter, lead_stats
from ....domain.types import LeadStatus, PropertyType
from ....schemas import (
    DeleteOut,
    LeadCreate,
    LeadOut,
    LeadStatsOut,
    LeadUpdate,
    LeadWriteOut,
    RemoteResultOut,
)
from ....service_layer.sync import SyncReconciler
from ....services.geocoding import ReverseGeocoder

router = APIRouter(tags=["leads"], dependencies=[Depends(require_api_key)])


def lead_filter_dep(
    status: list[str] | None = Query(default=None),
    property_type: list[str] | None = Query(default=None),
    priority: list[int] | None = Query(default=None),
    min_score: int | None = Query(default=None, ge=0, le=100),
    max_score: int | None = Query(default=None, ge=0, le=100),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    tag: list[str] | None = Query(default=None),
) -> LeadFilter:
    try:
        return LeadFilter(
            statuses=tuple(LeadStatus(s) for s in status or ()),
            property_types=tuple(PropertyType(t) for t in property_type or ()),
            priorities=tuple(priority or ()),
            min_distress_score=min_score,
            max_distress_score=max_score,
            start_date=start_date,
            end_date=end_date,
            tags=tuple(tag or ()),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/leads", response_model=LeadWriteOut, status_code=201)
async def create_lead(
    body: LeadCreate,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
    geocoder: ReverseGeocoder = Depends(get_geocoder),
) -> LeadWriteOut:
    draft = body.model_dump()
    if not draft["address"].strip():
        draft["address"] = (await geocoder.reverse(body.lat, body.lng)).address

    res = await reconciler.create_lead(user_id, draft)
    return LeadWriteOut(
        record=LeadOut.from_domain(res.local),
        remote=RemoteResultOut.from_result(res.remote),
    )


@router.get("/leads", response_model=list[LeadOut])
async def list_leads(
    lead_filter: LeadFilter = Depends(lead_filter_dep),
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> list[LeadOut]:
    leads = await reconciler.list_leads(user_id, lead_filter)
    return [LeadOut.from_domain(lead) for lead in leads]


@router.get("/leads/stats", response_model=LeadStatsOut)
async def get_lead_stats(
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> LeadStatsOut:
    leads = await reconciler.list_leads(user_id)
    return LeadStatsOut(**lead_stats(leads, now=utcnow()))


@router.get("/leads/{lead_id}", response_model=LeadOut)
async def get_lead(
    lead_id: str,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> LeadOut:
    return LeadOut.from_domain(await reconciler.get_lead(user_id, lead_id))


@router.patch("/leads/{lead_id}", response_model=LeadWriteOut)
async def update_lead(
    lead_id: str,
    body: LeadUpdate,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> LeadWriteOut:
    res = await reconciler.update_lead(user_id, lead_id, body.changes())
    return LeadWriteOut(
        record=LeadOut.from_domain(res.local),
        remote=RemoteResultOut.from_result(res.remote),
    )


@router.delete("/leads/{lead_id}", response_model=DeleteOut)
async def delete_lead(
    lead_id: str,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> DeleteOut:
    res = await reconciler.delete_lead(user_id, lead_id)
    return DeleteOut(
        id=lead_id,
        deleted=res.local,
        remote=RemoteResultOut.from_result(res.remote),
    )
