"""
Graph utilities over derived (parent, child) edges.
Shared by the reconciler (partitioning) and the layered layout.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx


def build_free_graph(node_ids: Iterable[str], edges: Iterable[Tuple[str, str]]) -> nx.DiGraph:
    """DiGraph over node_ids keeping only edges with both ends inside. Insertion order is preserved."""
    G = nx.DiGraph()
    G.add_nodes_from(node_ids)
    for parent, child in edges:
        if parent != child and parent in G and child in G:
            G.add_edge(parent, child)
    return G


def parent_lookup(edges: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """child -> parent from derived edges (first edge wins)."""
    parents: Dict[str, str] = {}
    for parent, child in edges:
        parents.setdefault(child, parent)
    return parents


def children_lookup(edges: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    """parent -> ordered children from derived edges."""
    children: Dict[str, List[str]] = {}
    for parent, child in edges:
        children.setdefault(parent, []).append(child)
    return children


def collect_descendants(
    start_ids: Iterable[str],
    edges: Iterable[Tuple[str, str]],
    include: Optional[Set[str]] = None,
) -> Set[str]:
    """start_ids plus every descendant reachable through edges. include: restrict descendants to this set."""
    G = nx.DiGraph()
    G.add_edges_from(edges)
    result: Set[str] = set()
    for sid in start_ids:
        result.add(sid)
        if sid not in G:
            continue
        for d in nx.descendants(G, sid):
            if include is None or d in include:
                result.add(d)
    return result
