"""Layout module - layered placement of free subgraphs, stacking detection, spacing config."""

from .config import LayoutConfig
from .stacking import is_stacked
from .sugiyama import compute_layout

__all__ = ["LayoutConfig", "compute_layout", "is_stacked"]
