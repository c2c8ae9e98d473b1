"""Areas: named groups of a node and its descendants, framed on the canvas."""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from layout.constants import AREA_EXTRA_HEIGHT, AREA_EXTRA_WIDTH, AREA_PADDING
from tree.model import TreeModel
from tree.types import ORIGIN, Position

from .engine import LayoutEngine

DEFAULT_AREA_COLOR = "#e3f2fd"
DEFAULT_AREA_SIZE = (400.0, 300.0)


@dataclass
class Area:
    id: str
    name: str
    nodes: List[str]
    color: str = DEFAULT_AREA_COLOR
    position: Position = ORIGIN
    size: Tuple[float, float] = DEFAULT_AREA_SIZE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "nodes": list(self.nodes),
            "color": self.color,
            "position": self.position.to_dict(),
            "size": {"width": self.size[0], "height": self.size[1]},
        }


def create_area_from_node(model: TreeModel, node_id: str, area_id: str, color: str = DEFAULT_AREA_COLOR) -> Area:
    """Area covering node_id and every owned descendant, hidden ones included."""
    node = model.get(node_id)
    return Area(
        id=area_id,
        name=node.label,
        nodes=model.subtree_ids(node_id),
        color=color,
        position=node.position,
    )


def calculate_area_bounds(area: Area, model: TreeModel) -> Tuple[Position, Tuple[float, float]]:
    """
    Frame the area's visible nodes: origin at the top-left node minus padding, size spanning
    all nodes plus room for one node box. Falls back to the stored frame when nothing is visible.
    """
    visible = set(model.visible_ids())
    members = [model.get(nid).position for nid in area.nodes if nid in visible]
    if not members:
        return area.position, area.size

    xs = [p.x for p in members]
    ys = [p.y for p in members]
    min_x, max_x, min_y, max_y = min(xs), max(xs), min(ys), max(ys)
    position = Position(min_x - AREA_PADDING, min_y - AREA_PADDING)
    size = (max_x - min_x + AREA_EXTRA_WIDTH, max_y - min_y + AREA_EXTRA_HEIGHT)
    return position, size


def zoom_to_area(engine: LayoutEngine, area: Area) -> List[str]:
    """Request a viewport fit on the area's visible nodes. Returns the ids sent."""
    visible = set(engine.model.visible_ids())
    node_ids = [nid for nid in area.nodes if nid in visible]
    engine.request_fit(node_ids)
    return node_ids
