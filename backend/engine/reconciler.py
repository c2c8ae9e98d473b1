"""
Placement reconciler: decides, per tree-change notification, which nodes are frozen
and which are free, and computes positions for the free ones only.

Pass kinds:
  NO_OP          structure unchanged, and not stacked or only piled up by manual placements
  LOCAL_FANOUT   one isolable expand/collapse; revealed unplaced children fan out from their parent
  FULL_RELAYOUT  anything else; layered layout over the free subset, frozen nodes act as anchors
  INITIAL        no previous signature; full layout with only manual placements frozen
"""

from typing import Dict, List, NamedTuple, Optional, Set, Tuple

from loguru import logger

from layout.config import LayoutConfig
from layout.stacking import is_stacked
from layout.sugiyama import compute_layout
from shared.geometry import join, split
from shared.graph import children_lookup, collect_descendants, parent_lookup
from tree.model import TreeModel
from tree.signature import Signature, compute_signature, diff_signatures, structure_changed
from tree.types import Position

from .state import LayoutSnapshot, ManualPlacementSet, PassKind


class PassResult(NamedTuple):
    kind: PassKind
    positions: Dict[str, Position]
    visible_ids: List[str]
    signature: Signature
    frozen: Set[str]
    stacked: bool


class PlacementReconciler:
    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def plan(self, model: TreeModel, snapshot: LayoutSnapshot, manual: ManualPlacementSet) -> PassResult:
        """Compute one pass without mutating anything. The engine applies the result."""
        entries = list(model.iter_visible())
        visible_ids = [e.node.id for e in entries]
        edges = [(e.parent_id, e.node.id) for e in entries if e.parent_id is not None]
        signature = compute_signature(model)

        if not visible_ids:
            return PassResult(PassKind.NO_OP, {}, [], signature, set(), False)

        placed_visible = {nid for nid in visible_ids if snapshot.is_placed(nid)}
        stacked = is_stacked(
            (model.get(nid).position for nid in visible_ids if nid in placed_visible),
            self.config.stack_cell_size,
            self.config.stack_ratio,
        )
        manual_closure = self._manual_closure(visible_ids, edges, manual, placed_visible)

        previous = snapshot.signature
        if previous is None:
            positions = self._layout_free(model, visible_ids, edges, manual_closure)
            return PassResult(PassKind.INITIAL, positions, visible_ids, signature, manual_closure, stacked)

        changed = structure_changed(previous, signature)
        if not changed and not stacked:
            return PassResult(PassKind.NO_OP, {}, visible_ids, signature, set(visible_ids), False)

        previous_ids = snapshot.previous_ids()
        if changed and not stacked:
            diff = diff_signatures(previous, signature)
            if diff.isolable:
                logger.debug("Isolable change at {}: +{} -{}", diff.isolated_node, len(diff.appeared), len(diff.disappeared))
                positions = self._fan_out(model, snapshot, visible_ids, edges, previous_ids)
                frozen = {nid for nid in visible_ids if nid not in positions}
                return PassResult(PassKind.LOCAL_FANOUT, positions, visible_ids, signature, frozen, False)

        if stacked:
            frozen = set(manual_closure)
        else:
            frozen = {nid for nid in visible_ids if nid in manual_closure or nid in previous_ids or nid in placed_visible}

        positions = self._layout_free(model, visible_ids, edges, frozen)
        if stacked and not changed and all(model.get(nid).position == p for nid, p in positions.items()):
            # The pile is made of manual placements and the free nodes already sit where
            # the layout puts them: nothing to recover
            return PassResult(PassKind.NO_OP, {}, visible_ids, signature, set(visible_ids), True)
        return PassResult(PassKind.FULL_RELAYOUT, positions, visible_ids, signature, frozen, stacked)

    # ------------------------------------------------------------------
    # Partitioning
    # ------------------------------------------------------------------

    @staticmethod
    def _manual_closure(
        visible_ids: List[str],
        edges: List[Tuple[str, str]],
        manual: ManualPlacementSet,
        placed_visible: Set[str],
    ) -> Set[str]:
        """Visible manual nodes plus their placed visible descendants. Unplaced descendants stay free."""
        visible = set(visible_ids)
        starts = [nid for nid in manual if nid in visible]
        if not starts:
            return set()
        return collect_descendants(starts, edges, include=placed_visible)

    def _layout_free(
        self,
        model: TreeModel,
        visible_ids: List[str],
        edges: List[Tuple[str, str]],
        frozen: Set[str],
    ) -> Dict[str, Position]:
        free = [nid for nid in visible_ids if nid not in frozen]
        if not free:
            return {}
        anchors = {nid: model.get(nid).position for nid in visible_ids if nid in frozen}
        return compute_layout(free, edges, anchors, self.config)

    # ------------------------------------------------------------------
    # Local fan-out
    # ------------------------------------------------------------------

    def _fan_out(
        self,
        model: TreeModel,
        snapshot: LayoutSnapshot,
        visible_ids: List[str],
        edges: List[Tuple[str, str]],
        previous_ids: Set[str],
    ) -> Dict[str, Position]:
        """
        Place newly revealed, never-placed nodes next to their parent: offset along the
        rank axis, spread evenly on the cross axis by index among the revealed children.
        When some siblings are already placed, revealed ones continue that column instead.
        Revealed nodes that were placed before keep their old position.
        """
        direction = self.config.direction
        parents = parent_lookup(edges)
        children = children_lookup(edges)
        positions: Dict[str, Position] = {}
        leftovers: List[str] = []

        for nid in visible_ids:
            if nid in previous_ids or snapshot.is_placed(nid):
                continue
            parent = parents.get(nid)
            parent_pos = positions.get(parent)
            if parent_pos is None and parent is not None and (parent in previous_ids or snapshot.is_placed(parent)):
                parent_pos = model.get(parent).position
            if parent_pos is None:
                leftovers.append(nid)
                continue
            siblings = children.get(parent, [nid])
            placed = [s for s in siblings if s in previous_ids or snapshot.is_placed(s)]
            revealed = [s for s in siblings if s not in placed]
            index = revealed.index(nid)
            if placed:
                # Continue the existing column past its last sibling
                along, cross = max(
                    (split(model.get(s).position, direction) for s in placed), key=lambda ac: ac[1]
                )
                positions[nid] = join(along, cross + (index + 1) * self.config.fanout_sep, direction)
                continue
            along, cross = split(parent_pos, direction)
            start = cross - (len(revealed) - 1) * self.config.fanout_sep / 2.0
            positions[nid] = join(along + self.config.fanout_offset, start + index * self.config.fanout_sep, direction)

        if leftovers:
            logger.debug("Fan-out fell back to layered layout for {} nodes", len(leftovers))
            anchors = {nid: positions.get(nid) or model.get(nid).position for nid in visible_ids if nid not in leftovers}
            positions.update(compute_layout(leftovers, edges, anchors, self.config))
        return positions
