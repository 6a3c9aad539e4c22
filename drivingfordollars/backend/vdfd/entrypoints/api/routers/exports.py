# vdfd/entrypoints/api/routers/exports.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from ..deps import current_user_id, get_reconciler, get_settings, require_api_key
from .leads import lead_filter_dep
from ....config import Settings
from ....domain.clock import utcnow
from ....domain.filters import LeadFilter
from ....schemas import ExportFormat
from ....service_layer.sync import SyncReconciler
from ....services.export import ExportOptions, export_leads

router = APIRouter(tags=["export"], dependencies=[Depends(require_api_key)])


@router.get("/export/leads")
async def export_leads_endpoint(
    format: ExportFormat = Query("csv"),
    include_notes: bool = Query(True),
    include_screenshots: bool = Query(True),
    lead_filter: LeadFilter = Depends(lead_filter_dep),
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
    settings: Settings = Depends(get_settings),
) -> Response:
    leads = await reconciler.list_leads(user_id)
    artifact = export_leads(
        leads,
        ExportOptions(
            format=format,
            include_notes=include_notes,
            include_screenshots=include_screenshots,
            filters=lead_filter,
            pdf_max_leads=settings.PDF_MAX_LEADS,
        ),
        now=utcnow(),
    )
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
