"""Tree API routes - forest reads and provider mutations. Every mutation notifies the engine."""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from engine import InteractionState, PassResult
from tree.search import collect_matches, expand_for_matches

from .. import state as api_state
from ..schemas import AttributeRequest, ChildrenRequest, ForestRequest, RootRequest, SearchRequest

router = APIRouter()


def pass_payload(result: Optional[PassResult]) -> Optional[dict]:
    """None when the notification was deferred by an ongoing interaction."""
    if result is None:
        return None
    return {"kind": result.kind.value, "visibleNodeIds": result.visible_ids, "placed": len(result.positions)}


def _not_found(node_id: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": f"Node not found: {node_id}"})


@router.get("")
async def get_tree():
    """Forest with positions, visible ids and interaction state."""
    engine = api_state.get_engine()
    return {
        "nodes": engine.model.to_forest(),
        "visibleNodeIds": engine.model.visible_ids(),
        "manual": list(engine.manual),
        "state": engine.interaction_state.value,
    }


@router.put("")
async def replace_forest(body: ForestRequest):
    """Provider rebuild. Nodes are re-associated by path when carryOver is set."""
    engine = api_state.get_engine()
    try:
        result = engine.load_forest(body.nodes, carry_over=body.carry_over)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"success": True, "pass": pass_payload(result)}


@router.post("/roots")
async def add_root(body: RootRequest):
    engine = api_state.get_engine()
    try:
        result = engine.add_root(body.model_dump(exclude_none=True))
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"success": True, "roots": engine.model.roots, "pass": pass_payload(result)}


@router.delete("/roots/{node_id}")
async def remove_root(node_id: str):
    engine = api_state.get_engine()
    if node_id not in engine.model:
        return _not_found(node_id)
    try:
        result = engine.remove_root(node_id)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"success": True, "roots": engine.model.roots, "pass": pass_payload(result)}


@router.post("/nodes/{node_id}/toggle")
async def toggle_node(node_id: str):
    engine = api_state.get_engine()
    if node_id not in engine.model:
        return _not_found(node_id)
    result = engine.toggle_expanded(node_id)
    return {"expanded": engine.model.get(node_id).expanded, "pass": pass_payload(result)}


@router.post("/nodes/{node_id}/children")
async def add_children(node_id: str, body: ChildrenRequest):
    """Lazy materialization: replace a folder's children with a fresh listing."""
    engine = api_state.get_engine()
    if node_id not in engine.model:
        return _not_found(node_id)
    try:
        result = engine.add_children(node_id, body.children)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"children": engine.model.get(node_id).children, "pass": pass_payload(result)}


@router.post("/nodes/{node_id}/attributes")
async def set_attribute(node_id: str, body: AttributeRequest):
    engine = api_state.get_engine()
    if node_id not in engine.model:
        return _not_found(node_id)
    try:
        result = engine.set_attribute(node_id, body.name, body.value)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"node": engine.model.node_to_dict(node_id), "pass": pass_payload(result)}


@router.post("/expand-all")
async def expand_all():
    result = api_state.get_engine().expand_all()
    return {"success": True, "pass": pass_payload(result)}


@router.post("/collapse-all")
async def collapse_all():
    result = api_state.get_engine().collapse_all()
    return {"success": True, "pass": pass_payload(result)}


@router.post("/relayout")
async def relayout():
    """Forget the last structure and run an initial pass. Manual placements stay."""
    engine = api_state.get_engine()
    if engine.interaction_state != InteractionState.IDLE:
        return JSONResponse(status_code=409, content={"error": "Interaction in progress"})
    engine.reset()
    return {"success": True, "pass": pass_payload(engine.reconcile())}


@router.post("/search")
async def search(body: SearchRequest):
    """Matches by label; with autoExpand, opens every branch leading to a match."""
    engine = api_state.get_engine()
    matches = collect_matches(engine.model, body.query)
    expanded = []
    result = None
    if body.auto_expand and matches:
        expanded = expand_for_matches(engine.model, matches)
        if expanded:
            result = engine.notify_tree_changed()
    return {"matches": matches, "expanded": expanded, "pass": pass_payload(result)}
