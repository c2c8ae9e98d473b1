"""Interaction API routes - drag, viewport, fit and areas. High-rate clients use the socket events instead."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from engine import calculate_area_bounds, create_area_from_node, zoom_to_area

from .. import state as api_state
from ..schemas import AreaRequest, DragBeginRequest, DragUpdateRequest, FitRequest, ViewportRequest

router = APIRouter()


@router.get("/state")
async def get_interaction_state():
    engine = api_state.get_engine()
    return {"state": engine.interaction_state.value, "viewport": engine.viewport.to_dict()}


@router.post("/drag/begin")
async def drag_begin(body: DragBeginRequest):
    engine = api_state.get_engine()
    started = engine.begin_drag(body.node_id, body.selected_ids)
    return {"started": started, "state": engine.interaction_state.value}


@router.post("/drag/update")
async def drag_update(body: DragUpdateRequest):
    engine = api_state.get_engine()
    engine.update_drag(body.node_id, body.position.model_dump())
    return {"state": engine.interaction_state.value}


@router.post("/drag/end")
async def drag_end():
    engine = api_state.get_engine()
    engine.end_drag()
    return {"state": engine.interaction_state.value}


@router.post("/viewport")
async def move_viewport(body: ViewportRequest):
    """Debounced: only the last move inside the window is written."""
    api_state.get_engine().move_viewport(body.x, body.y, body.zoom)
    return {"success": True}


@router.post("/fit")
async def request_fit(body: FitRequest):
    api_state.get_engine().request_fit(body.node_ids)
    return {"success": True}


@router.post("/area")
async def zoom_area(body: AreaRequest):
    """Build an area from a node and its descendants, frame it and zoom to it."""
    engine = api_state.get_engine()
    if body.node_id not in engine.model:
        return JSONResponse(status_code=404, content={"error": f"Node not found: {body.node_id}"})
    kwargs = {"color": body.color} if body.color else {}
    area = create_area_from_node(engine.model, body.node_id, f"area_{body.node_id}", **kwargs)
    area.position, area.size = calculate_area_bounds(area, engine.model)
    node_ids = zoom_to_area(engine, area)
    return {"area": area.to_dict(), "nodeIds": node_ids}
