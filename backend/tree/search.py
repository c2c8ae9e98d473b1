"""
Search-driven auto-expansion. Provider-side helper: decides which branches open,
the engine only reacts to the resulting expanded/children changes.
"""

from typing import List, Set

from .model import TreeModel


def collect_matches(model: TreeModel, query: str) -> List[str]:
    """Ids of all owned nodes whose label contains query (case-insensitive), in forest order."""
    needle = (query or "").strip().lower()
    if not needle:
        return []
    matches = []
    for root_id in model.roots:
        for nid in model.subtree_ids(root_id):
            if needle in model.get(nid).label.lower():
                matches.append(nid)
    return matches


def expand_for_matches(model: TreeModel, match_ids: List[str]) -> List[str]:
    """
    Expand every ancestor of a match, and matches that have children.
    Returns ids whose expanded flag actually flipped.
    """
    parents = model.parent_map()
    to_expand: Set[str] = set()
    for nid in match_ids:
        if nid not in model:
            continue
        if model.get(nid).children:
            to_expand.add(nid)
        current = parents.get(nid)
        while current is not None and current not in to_expand:
            to_expand.add(current)
            current = parents.get(current)

    flipped = []
    for nid in model.all_ids():
        if nid in to_expand and not model.get(nid).expanded:
            model.set_expanded(nid, True)
            flipped.append(nid)
    return flipped
