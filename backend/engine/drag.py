"""
Drag interaction state machine.

  Idle --begin_drag--> Dragging --update_drag--> Dragging --end_drag--> Settling --settle_delay--> Idle

Dragging only records live positions. On end_drag the commit is deferred by one
scheduler tick, then every tracked node that moved more than epsilon from its last
committed position is written to the Tree Model and marked manual. Reconciliation
stays suppressed until the state is back to Idle.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from loguru import logger

from shared.geometry import distance
from tree.model import TreeModel
from tree.types import Position

from .state import InteractionState, ManualPlacementSet


class DragStateMachine:
    def __init__(
        self,
        model: TreeModel,
        manual: ManualPlacementSet,
        scheduler: Any,
        epsilon: float,
        settle_delay: float,
        on_commit: Callable[[str, Position], None],
        on_idle: Callable[[], None],
    ):
        self.model = model
        self.manual = manual
        self.scheduler = scheduler
        self.epsilon = epsilon
        self.settle_delay = settle_delay
        self._on_commit = on_commit
        self._on_idle = on_idle

        self.state = InteractionState.IDLE
        self.start_positions: Dict[str, Position] = {}
        self.live_positions: Dict[str, Position] = {}
        self._locators: Dict[str, str] = {}
        self._commit_handle = None
        self._settle_handle = None

    @property
    def suppressing(self) -> bool:
        return self.state != InteractionState.IDLE

    def _track(self, node_id: str) -> bool:
        node = self.model.find(node_id)
        if node is None:
            logger.warning("Drag on unknown node {} ignored", node_id)
            return False
        self.start_positions[node_id] = node.position
        self._locators[node_id] = node.locator
        return True

    def begin_drag(self, node_id: str, selected_ids: Optional[Iterable[str]] = None) -> bool:
        if self.state == InteractionState.DRAGGING:
            logger.debug("begin_drag({}) while already dragging, ignored", node_id)
            return False
        if node_id not in self.model:
            logger.warning("Drag on unknown node {} ignored", node_id)
            return False
        if self.state == InteractionState.SETTLING:
            self._flush_settling()

        self.start_positions.clear()
        self.live_positions.clear()
        self._locators.clear()
        selected = [nid for nid in (selected_ids or []) if nid != node_id]
        self._track(node_id)
        if selected:
            for nid in selected:
                self._track(nid)
        self.state = InteractionState.DRAGGING
        return True

    def update_drag(self, node_id: str, position: Any) -> None:
        if self.state != InteractionState.DRAGGING:
            logger.debug("update_drag({}) outside a drag, ignored", node_id)
            return
        if node_id not in self.start_positions and not self._track(node_id):
            return
        self.live_positions[node_id] = Position.from_value(position)

    def end_drag(self) -> None:
        if self.state != InteractionState.DRAGGING:
            logger.debug("end_drag outside a drag, ignored")
            return
        self.state = InteractionState.SETTLING
        self._commit_handle = self.scheduler.call_soon(self._commit_and_settle)

    def cancel(self) -> None:
        """Abandon the interaction without committing anything."""
        for handle in (self._commit_handle, self._settle_handle):
            if handle is not None:
                handle.cancel()
        self._commit_handle = self._settle_handle = None
        self.start_positions.clear()
        self.live_positions.clear()
        self._locators.clear()
        self.state = InteractionState.IDLE

    # ------------------------------------------------------------------

    def _commit_and_settle(self) -> None:
        self._commit_handle = None
        self.commit()
        self._settle_handle = self.scheduler.call_later(self.settle_delay, self._finish_settle)

    def commit(self) -> List[str]:
        """Write positions that moved past epsilon. Returns committed ids."""
        committed: List[str] = []
        for node_id, final in self.live_positions.items():
            node = self.model.find(node_id)
            if node is None:
                logger.warning("Dragged node {} disappeared before commit", node_id)
                continue
            if node.locator != self._locators.get(node_id):
                logger.warning(
                    "Locator mismatch for node {}: started {}, now {}",
                    node_id, self._locators.get(node_id), node.locator,
                )
                continue
            if distance(node.position, final) <= self.epsilon:
                continue
            self.model.set_position(node_id, final)
            self.manual.add(node_id)
            committed.append(node_id)
            self._on_commit(node_id, final)
        self.start_positions.clear()
        self.live_positions.clear()
        self._locators.clear()
        return committed

    def _finish_settle(self) -> None:
        self._settle_handle = None
        self.state = InteractionState.IDLE
        self._on_idle()

    def _flush_settling(self) -> None:
        """A new drag starts while settling: run the pending commit now, drop the settle timer."""
        if self._commit_handle is not None:
            self._commit_handle.cancel()
            self._commit_handle = None
            self.commit()
        if self._settle_handle is not None:
            self._settle_handle.cancel()
            self._settle_handle = None
