"""
Engine output events. Names match the socket.io events relayed to the rendering client;
payloads are camelCase dicts.
"""

from typing import Any, Callable, Dict, List

from loguru import logger

POSITION_COMMITTED = "position-committed"
LAYOUT_PASS_COMPLETED = "layout-pass-completed"
VIEWPORT_FIT_REQUESTED = "viewport-fit-requested"
VIEWPORT_CHANGED = "viewport-changed"

ALL_EVENTS = (POSITION_COMMITTED, LAYOUT_PASS_COMPLETED, VIEWPORT_FIT_REQUESTED, VIEWPORT_CHANGED)

Handler = Callable[[str, Dict[str, Any]], None]


class EventBus:
    """Synchronous fan-out of engine events. Handler errors propagate to the emitter."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}
        self._wildcard: List[Handler] = []

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        if event not in ALL_EVENTS:
            raise ValueError(f"Unknown event: {event}")
        self._handlers.setdefault(event, []).append(handler)
        return lambda: self._handlers.get(event, []).remove(handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        self._wildcard.append(handler)
        return lambda: self._wildcard.remove(handler)

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        logger.trace("emit {} {}", event, payload)
        for handler in list(self._handlers.get(event, [])) + list(self._wildcard):
            handler(event, payload)


class EventRecorder:
    """Collects emitted events; handy for headless runs and tests."""

    def __init__(self, bus: EventBus):
        self.events: List[tuple] = []
        self._unsubscribe = bus.subscribe_all(self._record)

    def _record(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((event, payload))

    def of(self, event: str) -> List[Dict[str, Any]]:
        return [p for e, p in self.events if e == event]

    def clear(self) -> None:
        self.events.clear()

    def close(self) -> None:
        self._unsubscribe()
