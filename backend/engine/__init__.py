"""Engine module - incremental layout reconciliation, drag state machine, saved layouts."""

from .areas import Area, calculate_area_bounds, create_area_from_node, zoom_to_area
from .engine import LayoutEngine
from .events import (
    ALL_EVENTS,
    LAYOUT_PASS_COMPLETED,
    POSITION_COMMITTED,
    VIEWPORT_CHANGED,
    VIEWPORT_FIT_REQUESTED,
    EventBus,
    EventRecorder,
)
from .persistence import export_layout, restore_layout
from .reconciler import PassResult, PlacementReconciler
from .scheduler import AsyncioScheduler, ManualScheduler
from .state import InteractionState, LayoutSnapshot, ManualPlacementSet, PassKind

__all__ = [
    "ALL_EVENTS",
    "Area",
    "AsyncioScheduler",
    "EventBus",
    "EventRecorder",
    "InteractionState",
    "LAYOUT_PASS_COMPLETED",
    "LayoutEngine",
    "LayoutSnapshot",
    "ManualPlacementSet",
    "ManualScheduler",
    "POSITION_COMMITTED",
    "PassKind",
    "PassResult",
    "PlacementReconciler",
    "VIEWPORT_CHANGED",
    "VIEWPORT_FIT_REQUESTED",
    "calculate_area_bounds",
    "create_area_from_node",
    "export_layout",
    "restore_layout",
    "zoom_to_area",
]
