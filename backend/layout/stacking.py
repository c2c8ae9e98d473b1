"""
Stacking detector: recognizes piled-up layouts (uninitialized or corrupted positions).
Recovery heuristic only; a false positive costs one extra relayout.
"""

import math
from typing import Iterable

from tree.types import Position

from .constants import STACK_CELL_SIZE, STACK_RATIO


def _cell(value: float, cell_size: float) -> int:
    # Round half up, so 25 -> 1 and -25 -> 0 regardless of banker's rounding
    return math.floor(value / cell_size + 0.5)


def is_stacked(
    positions: Iterable[Position],
    cell_size: float = STACK_CELL_SIZE,
    ratio: float = STACK_RATIO,
) -> bool:
    """True when distinct grid cells cover less than ratio * node count."""
    points = list(positions)
    if len(points) <= 1:
        return False
    cells = {(_cell(p.x, cell_size), _cell(p.y, cell_size)) for p in points}
    return len(cells) < len(points) * ratio
