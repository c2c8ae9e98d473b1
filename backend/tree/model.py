"""
Tree Model - the single source of truth for the folder forest.

Nodes live in an arena keyed by id; each node owns an ordered list of child ids.
Parent lookup is derived on demand (parent_map), no back-pointers are stored.
Mutations are synchronous and never trigger layout; callers request reconciliation.
"""

import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .types import EDITABLE_ATTRIBUTES, ORIGIN, Position, TreeNode, VisibleEntry


def generate_node_id(locator: str) -> str:
    """Derive a stable id from a path, e.g. 'C:/Users/a b' -> 'C__Users_a_b'."""
    return re.sub(r"[^a-zA-Z0-9]", "_", locator)


def _spec_id(spec: Any) -> Optional[str]:
    if not isinstance(spec, dict):
        return None
    locator = spec.get("locator") or spec.get("path")
    return spec.get("id") or (generate_node_id(locator) if isinstance(locator, str) and locator else None)


def _build_nodes(spec: Dict[str, Any], out: Dict[str, TreeNode]) -> str:
    """Materialize a provider node spec (and its children) into out. Returns the node id."""
    if not isinstance(spec, dict):
        raise ValueError("Node spec must be a dict")
    locator = spec.get("locator") or spec.get("path") or spec.get("id")
    if not locator or not isinstance(locator, str):
        raise ValueError("Node spec requires an id or a locator/path")
    node_id = spec.get("id") or generate_node_id(locator)
    if node_id in out:
        raise ValueError(f"Duplicate node id: {node_id}")

    node = TreeNode(
        id=node_id,
        locator=locator,
        label=spec.get("label") or spec.get("name") or locator,
        icon=spec.get("icon") or "folder",
        color=spec.get("color") or "#e0e0e0",
        position=Position.from_value(spec["position"]) if spec.get("position") else ORIGIN,
        expanded=bool(spec.get("expanded", False)),
        has_more=bool(spec.get("hasMore", spec.get("hasChildren", False))),
    )
    out[node_id] = node
    for child in spec.get("children") or []:
        node.children.append(_build_nodes(child, out))
    return node_id


class TreeModel:
    def __init__(self):
        self._nodes: Dict[str, TreeNode] = {}
        self._roots: List[str] = []
        self._by_locator: Optional[Dict[str, str]] = None

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def roots(self) -> List[str]:
        return list(self._roots)

    def get(self, node_id: str) -> TreeNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise ValueError(f"Unknown node id: {node_id}")
        return node

    def find(self, node_id: str) -> Optional[TreeNode]:
        return self._nodes.get(node_id)

    def find_by_locator(self, locator: str) -> Optional[TreeNode]:
        """First node (in arena order) with this locator. The index is rebuilt after structural changes."""
        if self._by_locator is None:
            self._by_locator = {}
            for node in self._nodes.values():
                self._by_locator.setdefault(node.locator, node.id)
        node_id = self._by_locator.get(locator)
        return self._nodes.get(node_id) if node_id is not None else None

    def all_ids(self) -> List[str]:
        return list(self._nodes.keys())

    # ------------------------------------------------------------------
    # Visible forest
    # ------------------------------------------------------------------

    def iter_visible(self) -> Iterator[VisibleEntry]:
        """Preorder walk of the visible forest (children only under expanded nodes)."""
        visited = set()
        stack: List[Tuple[str, Optional[str], int]] = [(rid, None, 0) for rid in reversed(self._roots)]
        while stack:
            node_id, parent_id, depth = stack.pop()
            node = self._nodes.get(node_id)
            if node is None or node_id in visited:
                continue
            visited.add(node_id)
            yield VisibleEntry(node, parent_id, depth)
            if node.expanded:
                for child_id in reversed(node.children):
                    stack.append((child_id, node_id, depth + 1))

    def visible_ids(self) -> List[str]:
        return [e.node.id for e in self.iter_visible()]

    def derived_edges(self) -> List[Tuple[str, str]]:
        """(parent_id, child_id) pairs between currently visible nodes."""
        return [(e.parent_id, e.node.id) for e in self.iter_visible() if e.parent_id is not None]

    def parent_map(self) -> Dict[str, Optional[str]]:
        """Transient child -> parent map over all owned nodes."""
        parents: Dict[str, Optional[str]] = {rid: None for rid in self._roots}
        for node in self._nodes.values():
            for child_id in node.children:
                parents[child_id] = node.id
        return parents

    def visible_descendants(self, node_id: str) -> List[str]:
        node = self.get(node_id)
        result: List[str] = []
        seen = {node_id}
        stack = list(reversed(node.children)) if node.expanded else []
        while stack:
            current = self._nodes.get(stack.pop())
            if current is None or current.id in seen:
                continue
            seen.add(current.id)
            result.append(current.id)
            if current.expanded:
                stack.extend(reversed(current.children))
        return result

    def subtree_ids(self, node_id: str) -> List[str]:
        """node_id and every owned descendant, expanded or not."""
        result: List[str] = []
        seen = set()
        stack = [node_id]
        while stack:
            current = self._nodes.get(stack.pop())
            if current is None or current.id in seen:
                continue
            seen.add(current.id)
            result.append(current.id)
            stack.extend(reversed(current.children))
        return result

    # ------------------------------------------------------------------
    # Per-node mutation
    # ------------------------------------------------------------------

    def set_position(self, node_id: str, position: Any) -> None:
        self.get(node_id).position = Position.from_value(position)

    def set_expanded(self, node_id: str, expanded: bool) -> None:
        self.get(node_id).expanded = bool(expanded)

    def toggle_expanded(self, node_id: str) -> bool:
        node = self.get(node_id)
        node.expanded = not node.expanded
        return node.expanded

    def set_attribute(self, node_id: str, name: str, value: Any) -> None:
        if name not in EDITABLE_ATTRIBUTES:
            raise ValueError(f"Attribute not editable: {name}")
        setattr(self.get(node_id), name, bool(value) if name == "has_more" else value)

    def expand_all(self) -> None:
        self._set_expanded_for_tree(True)

    def collapse_all(self) -> None:
        self._set_expanded_for_tree(False)

    def _set_expanded_for_tree(self, expanded: bool) -> None:
        # Roots stay expanded either way
        for rid in self._roots:
            for nid in self.subtree_ids(rid):
                self._nodes[nid].expanded = True if nid == rid else expanded

    # ------------------------------------------------------------------
    # Forest mutation
    # ------------------------------------------------------------------

    def _merge(self, built: Dict[str, TreeNode]) -> None:
        clash = [nid for nid in built if nid in self._nodes]
        if clash:
            raise ValueError(f"Duplicate node id: {clash[0]}")
        self._nodes.update(built)
        self._by_locator = None

    def load_forest(self, specs: List[Dict[str, Any]]) -> List[str]:
        """Replace the whole forest. Returns the new root ids."""
        built: Dict[str, TreeNode] = {}
        roots = [_build_nodes(spec, built) for spec in specs or []]
        self._nodes = built
        self._roots = roots
        self._by_locator = None
        return list(roots)

    def add_root(self, spec: Dict[str, Any]) -> str:
        built: Dict[str, TreeNode] = {}
        root_id = _build_nodes(spec, built)
        self._merge(built)
        self._roots.append(root_id)
        return root_id

    def remove_root(self, node_id: str) -> List[str]:
        """Destroy a root and its whole subtree. Returns removed ids."""
        if node_id not in self._roots:
            raise ValueError(f"Not a root: {node_id}")
        removed = self.subtree_ids(node_id)
        for nid in removed:
            self._nodes.pop(nid, None)
        self._roots.remove(node_id)
        self._by_locator = None
        return removed

    def materialize_children(self, parent_id: str, specs: List[Dict[str, Any]]) -> List[str]:
        """
        Replace parent's children with a fresh listing, in listing order. Children already
        owned under the same id keep their node (position, expansion, subtree); children
        missing from the listing are destroyed with their subtrees. Returns destroyed ids.
        """
        parent = self.get(parent_id)
        existing = set(parent.children)
        built: Dict[str, TreeNode] = {}
        children: List[str] = []
        for spec in specs or []:
            spec_id = _spec_id(spec)
            if spec_id in existing:
                children.append(spec_id)
            else:
                children.append(_build_nodes(spec, built))
        children = list(dict.fromkeys(children))

        kept = set(children)
        removed: List[str] = []
        for child_id in parent.children:
            if child_id not in kept:
                removed.extend(self.subtree_ids(child_id))
        gone = set(removed)
        clash = [nid for nid in built if nid in self._nodes and nid not in gone]
        if clash:
            raise ValueError(f"Duplicate node id: {clash[0]}")
        for nid in removed:
            self._nodes.pop(nid, None)
        self._nodes.update(built)
        self._by_locator = None
        parent.children = children
        parent.has_more = False
        return removed

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def node_to_dict(self, node_id: str) -> Dict[str, Any]:
        node = self.get(node_id)
        return {
            "id": node.id,
            "path": node.locator,
            "name": node.label,
            "icon": node.icon,
            "color": node.color,
            "position": node.position.to_dict(),
            "expanded": node.expanded,
            "hasMore": node.has_more,
            "children": [self.node_to_dict(cid) for cid in node.children if cid in self._nodes],
        }

    def to_forest(self) -> List[Dict[str, Any]]:
        return [self.node_to_dict(rid) for rid in self._roots]
