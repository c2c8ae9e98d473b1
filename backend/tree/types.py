"""
Tree data types: canvas positions and folder nodes.
Pure data, no layout or persistence logic.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Position:
    """Point in canvas space."""
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_value(cls, value: Any) -> "Position":
        """Accept Position, {x, y} dict or (x, y) pair."""
        if isinstance(value, Position):
            return value
        if isinstance(value, dict):
            return cls(float(value.get("x") or 0), float(value.get("y") or 0))
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(float(value[0]), float(value[1]))
        raise ValueError(f"Invalid position: {value!r}")


ORIGIN = Position(0.0, 0.0)


@dataclass
class TreeNode:
    """One folder (or virtual grouping) in the forest. children holds owned child ids."""
    id: str
    locator: str
    label: str = ""
    icon: str = "folder"
    color: str = "#e0e0e0"
    position: Position = ORIGIN
    children: List[str] = field(default_factory=list)
    expanded: bool = False
    has_more: bool = False

    @property
    def child_count(self) -> int:
        return len(self.children)


@dataclass(frozen=True)
class VisibleEntry:
    """A node reached while walking the visible forest."""
    node: TreeNode
    parent_id: Optional[str]
    depth: int


# Attributes editable through TreeModel.set_attribute (display only, never layout-relevant)
EDITABLE_ATTRIBUTES = ("label", "icon", "color", "has_more")
