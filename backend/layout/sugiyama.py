"""
Layered (Sugiyama-style) layout for the free subgraph of the folder forest.

Runs on the nodes the reconciler left free; frozen nodes only serve as anchors.
1. Rank assignment (depth from the nearest free root)
2. Ordering (sibling insertion order, no crossing minimization: stability wins for a filesystem tree)
3. Cross-axis coordinates (leaves take consecutive slots, parents centered over their children)
4. Block placement (anchored groups centered on their frozen parent, pushed aside on ranks already
   taken; unanchored roots after all existing content)
"""

from typing import Dict, List, Optional, Sequence, Set, Tuple

import networkx as nx

from shared.geometry import join, split
from shared.graph import build_free_graph
from tree.types import Position

from .config import LayoutConfig


def compute_layout(
    free_ids: Sequence[str],
    edges: Sequence[Tuple[str, str]],
    anchors: Optional[Dict[str, Position]] = None,
    config: Optional[LayoutConfig] = None,
) -> Dict[str, Position]:
    """
    Position every free node.

    free_ids: free node ids in visible preorder.
    edges: derived (parent, child) edges of the visible forest; may reference frozen or unknown ids.
    anchors: current positions of frozen visible nodes.

    Returns {id: Position} for every id in free_ids.
    """
    config = config or LayoutConfig()
    anchors = anchors or {}
    free = list(dict.fromkeys(free_ids))
    if not free:
        return {}

    G = build_free_graph(free, edges)
    sibling_sep, rank_sep = config.spacing_for(G.number_of_nodes())
    direction = config.direction

    anchor_of = _anchor_parents(G, edges, anchors)
    along_start, cross_start = _content_origin(anchors, sibling_sep, direction)

    if G.number_of_edges() == 0 and not anchor_of:
        return _layout_row(free, along_start, cross_start, sibling_sep, direction)

    roots = _find_roots(G)
    ranks = _assign_ranks(G, roots)

    positions: Dict[str, Position] = {}

    # Anchored groups: free roots hanging off the same frozen parent
    groups: Dict[str, List[str]] = {}
    unanchored: List[str] = []
    for r in roots:
        if r in anchor_of:
            groups.setdefault(anchor_of[r], []).append(r)
        else:
            unanchored.append(r)

    # Cross coordinates already taken, per along level. Frozen nodes first, then each placed group.
    occupied = _Occupancy(sibling_sep)
    for p in anchors.values():
        occupied.add(*split(p, direction))

    for anchor_id, group_roots in groups.items():
        rel = _assign_cross_slots(G, group_roots, sibling_sep)
        anchor_along, anchor_cross = split(anchors[anchor_id], direction)
        center = (rel[group_roots[0]] + rel[group_roots[-1]]) / 2.0
        base_along = anchor_along + rank_sep
        block = [(base_along + ranks[nid] * rank_sep, cross) for nid, cross in rel.items()]
        shift = occupied.nearest_free_shift(block, anchor_cross - center)
        for nid, (along, cross) in zip(rel, block):
            positions[nid] = join(along, cross + shift, direction)
            occupied.add(along, cross + shift)

    if unanchored:
        if positions:
            # Past the anchored blocks as well as the frozen content
            cross_start = max(cross_start, max(split(p, direction)[1] for p in positions.values()) + sibling_sep)
        rel = _assign_cross_slots(G, unanchored, sibling_sep)
        shift = cross_start - min(rel.values())
        for nid, cross in rel.items():
            positions[nid] = join(along_start + ranks[nid] * rank_sep, cross + shift, direction)

    return positions


class _Occupancy:
    """Used cross coordinates per along level; a block fits when it keeps sibling_sep from all of them."""

    def __init__(self, sibling_sep: float):
        self.sep = sibling_sep
        self._levels: Dict[float, List[float]] = {}

    @staticmethod
    def _key(along: float) -> float:
        return round(along, 6)

    def add(self, along: float, cross: float) -> None:
        self._levels.setdefault(self._key(along), []).append(cross)

    def fits(self, block: List[Tuple[float, float]], shift: float) -> bool:
        for along, cross in block:
            for used in self._levels.get(self._key(along), ()):
                if abs(cross + shift - used) < self.sep - 1e-9:
                    return False
        return True

    def nearest_free_shift(self, block: List[Tuple[float, float]], ideal: float) -> float:
        """The shift closest to ideal that fits. Ties go to the larger shift (push past, not before)."""
        if self.fits(block, ideal):
            return ideal
        # A closest fit always touches some used slot at exactly sibling_sep
        candidates = set()
        for along, cross in block:
            for used in self._levels.get(self._key(along), ()):
                candidates.add(used + self.sep - cross)
                candidates.add(used - self.sep - cross)
        for shift in sorted(candidates, key=lambda s: (abs(s - ideal), -s)):
            if self.fits(block, shift):
                return shift
        return ideal


# ---------------------------------------------------------------------------
# 0. Anchors and origin
# ---------------------------------------------------------------------------

def _anchor_parents(
    G: nx.DiGraph,
    edges: Sequence[Tuple[str, str]],
    anchors: Dict[str, Position],
) -> Dict[str, str]:
    """free root -> frozen parent, for edges crossing from the frozen set into the free set."""
    anchor_of: Dict[str, str] = {}
    for parent, child in edges:
        if child in G and parent not in G and parent in anchors:
            anchor_of.setdefault(child, parent)
    return anchor_of


def _content_origin(
    anchors: Dict[str, Position],
    sibling_sep: float,
    direction: str,
) -> Tuple[float, float]:
    """(along, cross) where unanchored content starts: just past the existing content, or the origin."""
    if not anchors:
        return 0.0, 0.0
    coords = [split(p, direction) for p in anchors.values()]
    return min(a for a, _ in coords), max(c for _, c in coords) + sibling_sep


def _layout_row(
    free: List[str],
    along_start: float,
    cross_start: float,
    sibling_sep: float,
    direction: str,
) -> Dict[str, Position]:
    """Isolated nodes: one evenly spaced rank-0 row, no ranking."""
    return {
        nid: join(along_start, cross_start + i * sibling_sep, direction)
        for i, nid in enumerate(free)
    }


# ---------------------------------------------------------------------------
# 1. Rank assignment
# ---------------------------------------------------------------------------

def _find_roots(G: nx.DiGraph) -> List[str]:
    """Nodes without a free parent, in insertion order. Unreachable leftovers become roots too."""
    roots = [n for n in G.nodes() if G.in_degree(n) == 0]
    reached: Set[str] = set()
    for r in roots:
        reached.add(r)
        reached.update(nx.descendants(G, r))
    for n in G.nodes():
        if n not in reached:
            roots.append(n)
            reached.add(n)
            reached.update(nx.descendants(G, n))
    return roots


def _assign_ranks(G: nx.DiGraph, roots: List[str]) -> Dict[str, int]:
    """Depth from the nearest free root; nodes never reached get rank 0."""
    ranks: Dict[str, int] = {}
    for r in roots:
        for nid, depth in nx.single_source_shortest_path_length(G, r).items():
            if nid not in ranks or depth < ranks[nid]:
                ranks[nid] = depth
    for n in G.nodes():
        ranks.setdefault(n, 0)
    return ranks


# ---------------------------------------------------------------------------
# 2-3. Ordering and cross-axis coordinates
# ---------------------------------------------------------------------------

def _assign_cross_slots(G: nx.DiGraph, roots: List[str], sibling_sep: float) -> Dict[str, float]:
    """
    Relative cross coordinates for the subtrees under roots, laid out side by side.
    Leaves take consecutive slots sibling_sep apart; a parent sits at the midpoint of its
    first and last child. Siblings keep insertion order, so adjacent nodes of a rank are
    always at least sibling_sep apart.
    """
    cross: Dict[str, float] = {}
    next_slot = [0]

    def place(nid: str) -> float:
        children = [c for c in G.successors(nid) if c not in cross]
        if not children:
            cross[nid] = next_slot[0] * sibling_sep
            next_slot[0] += 1
            return cross[nid]
        cross[nid] = 0.0  # reserve, guards against revisiting
        first = last = None
        for c in children:
            value = place(c)
            first = value if first is None else first
            last = value
        cross[nid] = (first + last) / 2.0
        return cross[nid]

    for r in roots:
        if r not in cross:
            place(r)
    return cross
