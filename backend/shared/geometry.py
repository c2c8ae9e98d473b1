"""Axis helpers. LR: along = x, cross = y. TB: along = y, cross = x."""

import math
from typing import Tuple

from tree.types import Position


def split(position: Position, direction: str = "LR") -> Tuple[float, float]:
    """Position -> (along, cross)."""
    if direction == "TB":
        return position.y, position.x
    return position.x, position.y


def join(along: float, cross: float, direction: str = "LR") -> Position:
    """(along, cross) -> Position."""
    if direction == "TB":
        return Position(cross, along)
    return Position(along, cross)


def distance(a: Position, b: Position) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)
