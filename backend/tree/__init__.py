"""Tree module - folder forest model, structural signatures, search expansion."""

from .model import TreeModel, generate_node_id
from .signature import (
    Signature,
    SignatureDiff,
    SignatureEntry,
    compute_signature,
    diff_signatures,
    structure_changed,
)
from .types import ORIGIN, Position, TreeNode, VisibleEntry

__all__ = [
    "ORIGIN",
    "Position",
    "Signature",
    "SignatureDiff",
    "SignatureEntry",
    "TreeModel",
    "TreeNode",
    "VisibleEntry",
    "compute_signature",
    "diff_signatures",
    "generate_node_id",
    "structure_changed",
]
