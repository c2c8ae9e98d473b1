"""Saved layouts API - list, save current, restore, delete."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from db import create_layout, delete_layout, get_layout, list_layouts
from engine import export_layout, restore_layout

from .. import state as api_state
from ..schemas import LayoutSaveRequest
from .tree import pass_payload

router = APIRouter()


def _summary(layout: dict) -> dict:
    return {k: layout.get(k) for k in ("id", "name", "createdAt", "updatedAt")}


@router.get("")
async def list_layouts_route():
    """Saved layout summaries, newest first."""
    layouts = await list_layouts()
    return {"layouts": [_summary(l) for l in layouts]}


@router.post("")
async def save_layout_route(body: LayoutSaveRequest):
    """Snapshot the current tree, positions and manual placements under a name."""
    engine = api_state.get_engine()
    stored = await create_layout(export_layout(engine, body.name))
    return {"layout": _summary(stored)}


@router.get("/{layout_id}")
async def get_layout_route(layout_id: str):
    try:
        layout = await get_layout(layout_id)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    if layout is None:
        return JSONResponse(status_code=404, content={"error": f"Layout not found: {layout_id}"})
    return {"layout": layout}


@router.post("/{layout_id}/restore")
async def restore_layout_route(layout_id: str):
    engine = api_state.get_engine()
    try:
        layout = await get_layout(layout_id)
        if layout is None:
            return JSONResponse(status_code=404, content={"error": f"Layout not found: {layout_id}"})
        result = restore_layout(engine, layout)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"success": True, "pass": pass_payload(result)}


@router.delete("/{layout_id}")
async def delete_layout_route(layout_id: str):
    try:
        deleted = await delete_layout(layout_id)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    if not deleted:
        return JSONResponse(status_code=404, content={"error": f"Layout not found: {layout_id}"})
    return {"success": True}
