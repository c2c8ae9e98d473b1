"""
Saved layouts: export the engine state to a plain dict and restore it.

A saved layout is {name, positions, manual, signature, nodes}. Older layouts carry no
"manual" list; for those, every node sitting off the origin counts as manually placed.
"""

from typing import Any, Dict, Optional

from loguru import logger

from tree.signature import signature_from_rows, signature_to_rows
from tree.types import ORIGIN, Position

from .engine import LayoutEngine
from .state import InteractionState


def export_layout(engine: LayoutEngine, name: str) -> Dict[str, Any]:
    model = engine.model
    positions = {nid: model.get(nid).position.to_dict() for nid in model.all_ids()}
    signature = engine.snapshot.signature
    return {
        "name": name,
        "positions": positions,
        "manual": list(engine.manual),
        "signature": signature_to_rows(signature) if signature is not None else None,
        "nodes": model.to_forest(),
    }


def _infer_manual(positions: Dict[str, Position]) -> list:
    return [nid for nid, pos in positions.items() if pos != ORIGIN]


def restore_layout(engine: LayoutEngine, saved: Dict[str, Any]) -> Optional[Any]:
    """
    Replace the engine's forest with a saved layout and run one reconciliation.
    Seeding the snapshot signature and cache lets that pass be a NO_OP.
    """
    if engine.interaction_state != InteractionState.IDLE:
        raise ValueError("Cannot restore a layout during an interaction")
    if not isinstance(saved, dict) or not isinstance(saved.get("nodes"), list):
        raise ValueError("Saved layout must contain a 'nodes' list")

    engine.model.load_forest(saved["nodes"])
    model = engine.model

    positions: Dict[str, Position] = {}
    for nid, raw in (saved.get("positions") or {}).items():
        if nid not in model:
            logger.warning("Saved position for unknown node {} skipped", nid)
            continue
        positions[nid] = Position.from_value(raw)
        model.set_position(nid, positions[nid])

    manual = saved.get("manual")
    if manual is None:
        manual = _infer_manual(positions)
        logger.debug("Legacy layout: inferred {} manual placements", len(manual))
    engine.manual.replace(nid for nid in manual if nid in model)

    engine.snapshot.positions = dict(positions)
    rows = saved.get("signature")
    engine.snapshot.signature = signature_from_rows(rows) if rows else None
    logger.info("Restored layout {!r}: {} nodes, {} manual", saved.get("name"), len(model), len(engine.manual))
    return engine.reconcile()
