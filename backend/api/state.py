"""
Shared API state - sio and the layout engine.
Initialized by main.py after creating app and services.
"""

from typing import Any, Optional

from engine import LayoutEngine

# Set by main.py
sio: Any = None
engine: Optional[LayoutEngine] = None


def init_api_state(sio_instance, layout_engine: LayoutEngine):
    global sio, engine
    sio = sio_instance
    engine = layout_engine


def get_engine() -> LayoutEngine:
    if engine is None:
        raise RuntimeError("API state not initialized: call init_api_state first")
    return engine
