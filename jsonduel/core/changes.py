"""Flat, deterministic change list for a comparison.

Ordering guarantees:
- left pass first, in document order: removed and modified nodes
- then right (mirrored) pass, in document order: added nodes
- a removed or added subtree is reported once, at its top-most node
- a kind change (object replaced by array, ...) is one modified entry
- an empty container facing a filled one is one modified entry; the
  members on the other side are not listed again as added

Output format:
    [{"op":"removed","path":"$.a.b","old":...},
     {"op":"modified","path":"$.k","old":...,"new":...},
     {"op":"added","path":"$.x","value":...}]
"""
from __future__ import annotations

from typing import Any, Dict, List

from .classify import fills_empty_counterpart
from .compare import Comparison
from .resolve import format_path
from .types import Classification, DiffNode


def _collect(
    node: DiffNode, root: Any, ops: List[Dict[str, Any]], mirrored: bool = False
) -> None:
    stack = [node]
    while stack:
        current = stack.pop()
        if mirrored and fills_empty_counterpart(current):
            # Already reported as a modified empty container
            continue
        cls = current.classification
        path = format_path(current.path, root)
        if cls == Classification.REMOVED:
            ops.append({"op": "removed", "path": path, "old": current.value})
            continue
        if cls == Classification.ADDED:
            ops.append({"op": "added", "path": path, "value": current.value})
            continue
        if cls == Classification.MODIFIED:
            ops.append(
                {
                    "op": "modified",
                    "path": path,
                    "old": current.value,
                    "new": current.counterpart,
                }
            )
            continue
        stack.extend(reversed([c for c in current.children if c.has_differences]))


def list_changes(comparison: Comparison) -> List[Dict[str, Any]]:
    """Produce the ordered change list of a comparison (empty when not compared)."""
    ops: List[Dict[str, Any]] = []
    if not comparison.compared:
        return ops
    _collect(comparison.left, comparison.left_value, ops)

    added: List[Dict[str, Any]] = []
    _collect(comparison.right, comparison.right_value, added, mirrored=True)
    ops.extend(op for op in added if op["op"] == "added")
    return ops
