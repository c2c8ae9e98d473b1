"""Shared utilities for the tree, layout and engine modules."""

from .geometry import distance, join, split
from .graph import build_free_graph, children_lookup, collect_descendants, parent_lookup

__all__ = [
    "build_free_graph",
    "children_lookup",
    "collect_descendants",
    "distance",
    "join",
    "parent_lookup",
    "split",
]
