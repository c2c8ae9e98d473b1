"""
LayoutEngine - explicit owner of the tree, snapshot, manual placements and interaction state.
Every input goes through its methods; there is no ambient global store.
"""

from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from layout.config import LayoutConfig
from tree.model import TreeModel
from tree.types import Position

from .drag import DragStateMachine
from .events import (
    LAYOUT_PASS_COMPLETED,
    POSITION_COMMITTED,
    VIEWPORT_CHANGED,
    VIEWPORT_FIT_REQUESTED,
    EventBus,
)
from .reconciler import PassResult, PlacementReconciler
from .scheduler import AsyncioScheduler
from .state import InteractionState, LayoutSnapshot, ManualPlacementSet, PassKind
from .viewport import Viewport, ViewportDebouncer


class LayoutEngine:
    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        scheduler: Any = None,
        model: Optional[TreeModel] = None,
    ):
        self.config = config or LayoutConfig()
        self.scheduler = scheduler or AsyncioScheduler()
        self.model = model or TreeModel()
        self.snapshot = LayoutSnapshot()
        self.manual = ManualPlacementSet()
        self.events = EventBus()
        self.reconciler = PlacementReconciler(self.config)
        self.drag = DragStateMachine(
            self.model,
            self.manual,
            self.scheduler,
            epsilon=self.config.drag_epsilon,
            settle_delay=self.config.settle_delay,
            on_commit=self._on_drag_commit,
            on_idle=self._on_idle,
        )
        self.viewport = Viewport()
        self._viewport_debouncer = ViewportDebouncer(self.scheduler, self.config.viewport_debounce, self._write_viewport)
        self._pending_reconcile = False
        self.last_pass: Optional[PassResult] = None

    @property
    def interaction_state(self) -> InteractionState:
        return self.drag.state

    def configure(self, config: LayoutConfig) -> None:
        """Swap layout settings. Applies to the next pass and the next drag."""
        self.config = config
        self.reconciler.config = config
        self.drag.epsilon = config.drag_epsilon
        self.drag.settle_delay = config.settle_delay
        self._viewport_debouncer.delay = config.viewport_debounce

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def notify_tree_changed(self) -> Optional[PassResult]:
        """Entry point after any tree mutation. Suppressed (and remembered) while not Idle."""
        if self.drag.suppressing:
            logger.debug("Reconciliation suppressed while {}", self.drag.state.value)
            self._pending_reconcile = True
            return None
        return self.reconcile()

    def reconcile(self) -> PassResult:
        if self.drag.suppressing:
            raise ValueError("Cannot reconcile while an interaction is in progress")
        self._pending_reconcile = False
        result = self.reconciler.plan(self.model, self.snapshot, self.manual)

        source = "fanout" if result.kind == PassKind.LOCAL_FANOUT else "layout"
        for node_id, position in result.positions.items():
            self._commit_position(node_id, position, source)

        self.snapshot.signature = result.signature if result.visible_ids else None
        self.last_pass = result
        logger.debug("Layout pass {}: {} placed, {} visible", result.kind.value, len(result.positions), len(result.visible_ids))

        self.events.emit(LAYOUT_PASS_COMPLETED, {"visibleNodeIds": result.visible_ids, "kind": result.kind.value})
        if result.kind == PassKind.INITIAL:
            self.request_fit()
        return result

    def reset(self) -> None:
        """Forget the reconciled structure; the next pass is INITIAL."""
        self.snapshot.reset()

    def _commit_position(self, node_id: str, position: Position, source: str) -> None:
        self.model.set_position(node_id, position)
        self.snapshot.remember(node_id, position)
        self.events.emit(POSITION_COMMITTED, {"nodeId": node_id, "position": position.to_dict(), "source": source})

    def _on_drag_commit(self, node_id: str, position: Position) -> None:
        self.snapshot.remember(node_id, position)
        self.events.emit(POSITION_COMMITTED, {"nodeId": node_id, "position": position.to_dict(), "source": "drag"})

    def _on_idle(self) -> None:
        if self._pending_reconcile:
            logger.debug("Running reconciliation deferred during interaction")
            self.reconcile()

    def _forget_destroyed(self, removed: Iterable[str]) -> None:
        removed = list(removed)
        self.manual.prune(removed)
        self.snapshot.forget(removed)

    # ------------------------------------------------------------------
    # Tree inputs (mutate, then notify)
    # ------------------------------------------------------------------

    def toggle_expanded(self, node_id: str) -> Optional[PassResult]:
        self.model.toggle_expanded(node_id)
        return self.notify_tree_changed()

    def set_expanded(self, node_id: str, expanded: bool) -> Optional[PassResult]:
        self.model.set_expanded(node_id, expanded)
        return self.notify_tree_changed()

    def expand_all(self) -> Optional[PassResult]:
        self.model.expand_all()
        return self.notify_tree_changed()

    def collapse_all(self) -> Optional[PassResult]:
        self.model.collapse_all()
        return self.notify_tree_changed()

    def set_attribute(self, node_id: str, name: str, value: Any) -> Optional[PassResult]:
        self.model.set_attribute(node_id, name, value)
        return self.notify_tree_changed()

    def add_root(self, spec: Dict[str, Any]) -> Optional[PassResult]:
        self.model.add_root(spec)
        return self.notify_tree_changed()

    def remove_root(self, node_id: str) -> Optional[PassResult]:
        self._forget_destroyed(self.model.remove_root(node_id))
        return self.notify_tree_changed()

    def add_children(self, parent_id: str, specs: List[Dict[str, Any]]) -> Optional[PassResult]:
        self._forget_destroyed(self.model.materialize_children(parent_id, specs))
        return self.notify_tree_changed()

    def load_forest(self, specs: List[Dict[str, Any]], carry_over: bool = True) -> Optional[PassResult]:
        """
        Replace the forest (provider rebuild). With carry_over, nodes are re-associated by
        locator: position, manual flag, known placement and signature entries follow the
        node even when its id was regenerated.
        """
        old = {}
        if carry_over:
            for nid in self.model.all_ids():
                node = self.model.get(nid)
                old.setdefault(node.locator, (nid, node.position))
        old_ids = self.model.all_ids()

        self.model.load_forest(specs)

        renamed: Dict[str, str] = {}
        manual_ids = [nid for nid in self.manual]
        known = dict(self.snapshot.positions)
        self.snapshot.forget(old_ids)
        self.manual.prune(old_ids)
        for locator, (old_id, position) in old.items():
            node = self.model.find_by_locator(locator)
            if node is None:
                continue
            nid = node.id
            renamed[old_id] = nid
            node.position = position
            if old_id in known:
                self.snapshot.remember(nid, position)
            if old_id in manual_ids:
                self.manual.add(nid)

        if self.snapshot.signature is not None:
            if carry_over:
                self.snapshot.signature = tuple(e._replace(id=renamed.get(e.id, e.id)) for e in self.snapshot.signature)
            else:
                self.snapshot.reset()
        return self.notify_tree_changed()

    # ------------------------------------------------------------------
    # Interaction inputs
    # ------------------------------------------------------------------

    def begin_drag(self, node_id: str, selected_ids: Optional[Iterable[str]] = None) -> bool:
        return self.drag.begin_drag(node_id, selected_ids)

    def update_drag(self, node_id: str, position: Any) -> None:
        self.drag.update_drag(node_id, position)

    def end_drag(self) -> None:
        self.drag.end_drag()

    def move_viewport(self, x: float, y: float, zoom: float) -> None:
        self._viewport_debouncer.move(x, y, zoom)

    def _write_viewport(self, viewport: Viewport) -> None:
        self.viewport = viewport
        self.events.emit(VIEWPORT_CHANGED, viewport.to_dict())

    def request_fit(self, node_ids: Optional[Iterable[str]] = None) -> None:
        """Ask the rendering layer to fit the camera to node_ids (None = all content)."""
        self.events.emit(VIEWPORT_FIT_REQUESTED, {"nodeIds": list(node_ids) if node_ids is not None else None})

    def close(self) -> None:
        self._viewport_debouncer.close()
        self.drag.cancel()
