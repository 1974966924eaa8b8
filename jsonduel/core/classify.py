"""Path-based diff classification for JSON trees.

Walks one tree (the primary) and classifies every node against whatever
lives at the same path in the counterpart tree.

Algorithm:
1. Resolve the counterpart value at the node's path, starting from the
   counterpart root every time (no parent references are kept).
2. Leaf units (primitives and empty containers) are compared by strict JSON
   equality: unchanged, modified, or removed when the path is absent. An
   empty container facing a filled one of the same kind counts one
   difference per leaf unit of the counterpart, as if its members were
   removed one by one.
3. Containers with an absent counterpart are removed as a whole, and every
   descendant is still visited so that each removed leaf is counted.
4. Containers whose counterpart is of another kind are modified as a whole
   and counted once; their descendants are tagged modified without counts.
5. Containers of the same kind are unchanged themselves and carry the counts
   of their members.

In a mirrored pass (walking the right document against the left) nodes
missing from the counterpart are tagged added instead of removed.

Counts are folded bottom-up into each node, so the root carries the
statistics of the whole pass. The walk uses an explicit stack; document
depth is not bounded by the interpreter recursion limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .canon import json_equal
from .resolve import resolve
from .types import (
    ABSENT,
    Classification,
    DiffNode,
    Path,
    is_composite,
    kind_of,
)

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    value: Any
    path: Path
    key: Optional[str]
    parent: int
    counterpart: Any
    classification: Classification
    identical: int = 0
    differences: int = 0
    descend: bool = False
    tag_children: bool = False


def _members(value: Any) -> List[Tuple[str, Any]]:
    if isinstance(value, dict):
        return list(value.items())
    return [(str(i), v) for i, v in enumerate(value)]


def leaf_units(value: Any) -> int:
    """Number of leaf units (primitives and empty containers) in *value*."""
    count = 0
    stack = [value]
    while stack:
        current = stack.pop()
        if is_composite(current) and len(current) > 0:
            stack.extend(v for _, v in _members(current))
        else:
            count += 1
    return count


def fills_empty_counterpart(node: DiffNode) -> bool:
    """True for a non-empty container whose counterpart is an empty one of the same kind.

    Its members are already counted by the pass walking the empty side.
    """
    counterpart = node.counterpart
    return (
        bool(node.children)
        and is_composite(counterpart)
        and len(counterpart) == 0
        and kind_of(counterpart) == node.kind
    )


def _visit(
    value: Any,
    path: Path,
    key: Optional[str],
    parent: int,
    counterpart_root: Any,
    missing: Classification,
    tagged: bool,
) -> _Frame:
    if tagged:
        # Below a kind mismatch: not comparable, not counted
        return _Frame(
            value,
            path,
            key,
            parent,
            ABSENT,
            Classification.MODIFIED,
            descend=is_composite(value),
            tag_children=True,
        )

    counterpart = resolve(counterpart_root, path)

    if not is_composite(value) or len(value) == 0:
        if counterpart is ABSENT:
            return _Frame(value, path, key, parent, counterpart, missing, differences=1)
        if json_equal(value, counterpart):
            return _Frame(
                value, path, key, parent, counterpart, Classification.UNCHANGED, identical=1
            )
        if is_composite(value) and kind_of(value) == kind_of(counterpart):
            # Empty against filled: one difference per leaf unit of the counterpart
            return _Frame(
                value,
                path,
                key,
                parent,
                counterpart,
                Classification.MODIFIED,
                differences=leaf_units(counterpart),
            )
        return _Frame(
            value, path, key, parent, counterpart, Classification.MODIFIED, differences=1
        )

    if counterpart is ABSENT:
        return _Frame(value, path, key, parent, counterpart, missing, descend=True)

    if kind_of(value) != kind_of(counterpart):
        return _Frame(
            value,
            path,
            key,
            parent,
            counterpart,
            Classification.MODIFIED,
            differences=1,
            descend=True,
            tag_children=True,
        )

    return _Frame(
        value, path, key, parent, counterpart, Classification.UNCHANGED, descend=True
    )


def classify(
    value: Any,
    path: Iterable[str] = (),
    counterpart_root: Any = ABSENT,
    *,
    mirrored: bool = False,
) -> DiffNode:
    """Classify *value* (living at *path*) and all its descendants.

    Args:
        value: The node value in the primary tree.
        path: Location of *value* in the primary tree; () for a document root.
        counterpart_root: Root of the other document, or ABSENT.
        mirrored: Tag nodes missing from the counterpart as added rather
                  than removed.

    Returns:
        The classified node. Its identical/differences counts cover the
        whole subtree.
    """
    missing = Classification.ADDED if mirrored else Classification.REMOVED
    root_path: Path = tuple(path)
    root_key = root_path[-1] if root_path else None

    # Pre-order pass: decide every node, children always after their parent
    frames: List[_Frame] = []
    stack: List[Tuple[Any, Path, Optional[str], int, bool]] = [
        (value, root_path, root_key, -1, False)
    ]
    while stack:
        v, p, k, parent, tagged = stack.pop()
        frame = _visit(v, p, k, parent, counterpart_root, missing, tagged)
        idx = len(frames)
        frames.append(frame)
        if frame.descend:
            for child_key, child_value in reversed(_members(v)):
                stack.append(
                    (child_value, p + (child_key,), child_key, idx, frame.tag_children)
                )

    # Post-order pass: build immutable nodes and fold counts upwards
    children_of: Dict[int, List[DiffNode]] = {}
    root: Optional[DiffNode] = None
    for idx in range(len(frames) - 1, -1, -1):
        frame = frames[idx]
        children = children_of.pop(idx, [])
        children.reverse()
        node = DiffNode(
            path=frame.path,
            key=frame.key,
            kind=kind_of(frame.value),
            value=frame.value,
            counterpart=frame.counterpart,
            classification=frame.classification,
            children=tuple(children),
            identical=frame.identical + sum(c.identical for c in children),
            differences=frame.differences + sum(c.differences for c in children),
        )
        if frame.parent < 0:
            root = node
        else:
            children_of.setdefault(frame.parent, []).append(node)

    assert root is not None
    logger.debug(
        "Classified %d nodes at %r (mirrored=%s): %d identical, %d differences",
        len(frames),
        root_path,
        mirrored,
        root.identical,
        root.differences,
    )
    return root


def count_classifications(node: DiffNode) -> Dict[Classification, int]:
    """Number of leaf units per classification in the subtree of *node*.

    Nodes below a kind mismatch are not leaf units and are not counted.
    """
    counts = {c: 0 for c in Classification}
    stack = [(node, False)]
    while stack:
        current, tagged = stack.pop()
        if tagged:
            continue
        if not current.children:
            counts[current.classification] += 1
            continue
        mismatch = (
            current.classification == Classification.MODIFIED
            and current.counterpart is not ABSENT
        )
        if mismatch:
            counts[Classification.MODIFIED] += 1
        for child in current.children:
            stack.append((child, mismatch))
    return counts
