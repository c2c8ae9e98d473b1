"""
Engine-held state besides the tree itself: the layout snapshot used for diffing,
the sticky manual placement set, the interaction state and pass kinds.
"""

from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Set

from tree.signature import Signature
from tree.types import Position


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    SETTLING = "settling"


class PassKind(str, Enum):
    NO_OP = "NO_OP"
    LOCAL_FANOUT = "LOCAL_FANOUT"
    FULL_RELAYOUT = "FULL_RELAYOUT"
    INITIAL = "INITIAL"


class LayoutSnapshot:
    """
    Signature of the last reconciled structure (None = never reconciled) and the last
    known position of every node the engine placed, hidden ones included.
    Not authoritative: the Tree Model owns positions.
    """

    def __init__(self):
        self.signature: Optional[Signature] = None
        self.positions: Dict[str, Position] = {}

    def is_placed(self, node_id: str) -> bool:
        return node_id in self.positions

    def remember(self, node_id: str, position: Position) -> None:
        self.positions[node_id] = position

    def forget(self, node_ids: Iterable[str]) -> None:
        for nid in node_ids:
            self.positions.pop(nid, None)

    def previous_ids(self) -> Set[str]:
        return {e.id for e in self.signature or ()}

    def reset(self) -> None:
        """Drop the signature; the next pass is INITIAL. Known positions stay."""
        self.signature = None


class ManualPlacementSet:
    """Ids committed by a user drag. Automatic reconciliation never removes members."""

    def __init__(self, ids: Optional[Iterable[str]] = None):
        self._ids: Set[str] = set(ids or ())

    def add(self, node_id: str) -> None:
        self._ids.add(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def prune(self, destroyed_ids: Iterable[str]) -> None:
        """Only for nodes that no longer exist."""
        self._ids.difference_update(destroyed_ids)

    def replace(self, ids: Iterable[str]) -> None:
        """Seed from a restored layout."""
        self._ids = set(ids)
