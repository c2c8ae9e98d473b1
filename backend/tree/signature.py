"""
Structural signature of the visible forest and change classification.

A signature is the preorder tuple of (id, child_count, expanded) over visible nodes.
Positions and display attributes are excluded, so color edits, selection or search
highlight never register as a shape change. Because visible children of a node are
exactly its owned children when expanded, the preorder tuple also encodes parentage.
"""

from typing import Dict, List, NamedTuple, Optional, Sequence, Set, Tuple

from .model import TreeModel


class SignatureEntry(NamedTuple):
    id: str
    child_count: int
    expanded: bool


Signature = Tuple[SignatureEntry, ...]


class SignatureDiff(NamedTuple):
    changed: List[str]
    appeared: List[str]
    disappeared: List[str]
    isolated_node: Optional[str]

    @property
    def isolable(self) -> bool:
        return self.isolated_node is not None


def compute_signature(model: TreeModel) -> Signature:
    return tuple(
        SignatureEntry(e.node.id, e.node.child_count, e.node.expanded)
        for e in model.iter_visible()
    )


def structure_changed(previous: Optional[Signature], current: Signature) -> bool:
    return previous != current


def signature_from_rows(rows: Sequence[Sequence]) -> Signature:
    """Rebuild a signature from persisted [[id, childCount, expanded], ...] rows."""
    result = []
    for row in rows or []:
        if len(row) != 3:
            raise ValueError(f"Invalid signature row: {row!r}")
        result.append(SignatureEntry(str(row[0]), int(row[1]), bool(row[2])))
    return tuple(result)


def signature_to_rows(signature: Optional[Signature]) -> List[list]:
    return [[e.id, e.child_count, e.expanded] for e in signature or ()]


def signature_parents(signature: Signature) -> Dict[str, Optional[str]]:
    """Decode child -> parent from a preorder signature."""
    parents: Dict[str, Optional[str]] = {}
    # stack of [node_id, remaining visible children]
    stack: List[list] = []
    for entry in signature:
        while stack and stack[-1][1] == 0:
            stack.pop()
        if stack:
            parents[entry.id] = stack[-1][0]
            stack[-1][1] -= 1
        else:
            parents[entry.id] = None
        visible_children = entry.child_count if entry.expanded else 0
        stack.append([entry.id, visible_children])
    return parents


def _descends_from(node_id: str, ancestor: str, parents: Dict[str, Optional[str]]) -> bool:
    seen: Set[str] = set()
    current = parents.get(node_id)
    while current is not None and current not in seen:
        if current == ancestor:
            return True
        seen.add(current)
        current = parents.get(current)
    return False


def diff_signatures(previous: Optional[Signature], current: Signature) -> SignatureDiff:
    """
    Classify the change between two signatures. The change is isolable when exactly one
    node's (child_count, expanded) differs and every appeared/disappeared node sits under it.
    """
    prev = previous or ()
    prev_map = {e.id: e for e in prev}
    cur_map = {e.id: e for e in current}

    changed = [
        e.id for e in current
        if e.id in prev_map and (prev_map[e.id].child_count, prev_map[e.id].expanded) != (e.child_count, e.expanded)
    ]
    appeared = [e.id for e in current if e.id not in prev_map]
    disappeared = [e.id for e in prev if e.id not in cur_map]

    isolated = None
    if len(changed) == 1:
        target = changed[0]
        cur_parents = signature_parents(current)
        prev_parents = signature_parents(prev)
        if all(_descends_from(nid, target, cur_parents) for nid in appeared) and all(
            _descends_from(nid, target, prev_parents) for nid in disappeared
        ):
            isolated = target

    return SignatureDiff(changed, appeared, disappeared, isolated)
