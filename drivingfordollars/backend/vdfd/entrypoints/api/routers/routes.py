# vdfd/entrypoints/api/routers/routes.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import current_user_id, get_reconciler, require_api_key
from ....domain.types import Coordinate, Route
from ....schemas import (
    CoordinateModel,
    DeleteOut,
    OptimizeRequest,
    RemoteResultOut,
    RouteCreate,
    RouteFromLeads,
    RouteOut,
    RouteUpdate,
    RouteWriteOut,
)
from ....service_layer.sync import SyncReconciler, WriteResult

router = APIRouter(tags=["routes"], dependencies=[Depends(require_api_key)])


def _coord(c: CoordinateModel | None) -> Coordinate | None:
    return Coordinate(lat=c.lat, lng=c.lng) if c is not None else None


def _write_out(res: WriteResult[Route]) -> RouteWriteOut:
    return RouteWriteOut(record=RouteOut.from_domain(res.local), remote=RemoteResultOut.from_result(res.remote))


@router.post("/routes", response_model=RouteWriteOut, status_code=201)
async def create_route(
    body: RouteCreate,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> RouteWriteOut:
    draft = body.model_dump(exclude={"waypoints", "optimize", "start_point"})
    draft["waypoints"] = [w.to_domain() for w in body.waypoints]
    res = await reconciler.create_route(
        user_id,
        draft,
        optimize=body.optimize,
        start_point=_coord(body.start_point),
    )
    return _write_out(res)


@router.post("/routes/from-leads", response_model=RouteWriteOut, status_code=201)
async def create_route_from_leads(
    body: RouteFromLeads,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> RouteWriteOut:
    res = await reconciler.create_route_from_leads(
        user_id,
        body.name,
        body.lead_ids,
        optimize=body.optimize,
        start_point=_coord(body.start_point),
    )
    return _write_out(res)


@router.get("/routes", response_model=list[RouteOut])
async def list_routes(
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> list[RouteOut]:
    return [RouteOut.from_domain(r) for r in await reconciler.list_routes(user_id)]


@router.get("/routes/{route_id}", response_model=RouteOut)
async def get_route(
    route_id: str,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> RouteOut:
    return RouteOut.from_domain(await reconciler.get_route(user_id, route_id))


@router.patch("/routes/{route_id}", response_model=RouteWriteOut)
async def update_route(
    route_id: str,
    body: RouteUpdate,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> RouteWriteOut:
    return _write_out(await reconciler.update_route(user_id, route_id, body.changes()))


@router.post("/routes/{route_id}/optimize", response_model=RouteWriteOut)
async def optimize_route(
    route_id: str,
    body: OptimizeRequest | None = None,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> RouteWriteOut:
    start = _coord(body.start_point) if body is not None else None
    res = await reconciler.update_route(user_id, route_id, {}, optimize=True, start_point=start)
    return _write_out(res)


@router.delete("/routes/{route_id}", response_model=DeleteOut)
async def delete_route(
    route_id: str,
    user_id: str = Depends(current_user_id),
    reconciler: SyncReconciler = Depends(get_reconciler),
) -> DeleteOut:
    res = await reconciler.delete_route(user_id, route_id)
    return DeleteOut(id=route_id, deleted=res.local, remote=RemoteResultOut.from_result(res.remote))
