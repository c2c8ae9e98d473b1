"""Viewport pan/zoom debouncing: continuous pointer moves collapse into one write per window."""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from loguru import logger


@dataclass(frozen=True)
class Viewport:
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def to_dict(self) -> dict:
        return {"pan": {"x": self.x, "y": self.y}, "zoom": self.zoom}


class ViewportDebouncer:
    def __init__(self, scheduler: Any, delay: float, on_flush: Callable[[Viewport], None]):
        self._scheduler = scheduler
        self.delay = delay
        self._on_flush = on_flush
        self._pending: Optional[Viewport] = None
        self._handle = None

    def move(self, x: float, y: float, zoom: float) -> None:
        if zoom <= 0:
            raise ValueError("zoom must be positive")
        self._pending = Viewport(float(x), float(y), float(zoom))
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self._scheduler.call_later(self.delay, self._flush)

    def _flush(self) -> None:
        self._handle = None
        viewport, self._pending = self._pending, None
        if viewport is not None:
            logger.debug("Viewport write: {}", viewport)
            self._on_flush(viewport)

    def close(self) -> None:
        """Drop any pending write."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None
