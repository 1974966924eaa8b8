"""Text presentation of comparisons.

Each node is one line: a classification marker, indentation, the label
leading to the node and its value.

    ~ "age": 30 -> 31
    - "email": "a@example.com"
      "tags": [2 items]
"""

from __future__ import annotations

import json
from typing import List, Optional

from .core.canon import canonical_json
from .core.compare import Comparison
from .core.types import ABSENT, Classification, CompareOptions, DiffNode, DiffStats

MARKERS = {
    Classification.UNCHANGED: " ",
    Classification.MODIFIED: "~",
    Classification.REMOVED: "-",
    Classification.ADDED: "+",
}

_MAX_VALUE_LEN = 40


def _compact(value) -> str:
    text = canonical_json(value)
    if len(text) > _MAX_VALUE_LEN:
        text = text[: _MAX_VALUE_LEN - 3] + "..."
    return text


def _container_text(node: DiffNode) -> str:
    n = len(node.value)
    if node.kind == "array":
        return f"[{n} item{'s' if n != 1 else ''}]"
    return f"{{{n} propert{'ies' if n != 1 else 'y'}}}"


def _value_text(node: DiffNode) -> str:
    if node.is_composite and node.children:
        text = _container_text(node)
    else:
        text = _compact(node.value)
    modified_leaf = (
        node.classification == Classification.MODIFIED and node.counterpart is not ABSENT
    )
    if modified_leaf:
        text += f" -> {_compact(node.counterpart)}"
    return text


def render_tree(node: DiffNode, indent: str = "  ") -> str:
    """Render a classified (possibly filtered) tree, one node per line."""
    lines: List[str] = []
    stack = [(node, 0, None)]
    while stack:
        current, depth, parent_kind = stack.pop()
        if current.key is None or depth == 0:
            label = ""
        elif parent_kind == "array":
            label = f"[{current.key}] "
        else:
            label = f"{json.dumps(current.key, ensure_ascii=False)}: "
        marker = MARKERS[current.classification]
        lines.append(f"{marker} {indent * depth}{label}{_value_text(current)}")
        for child in reversed(current.children):
            stack.append((child, depth + 1, current.kind))
    return "\n".join(lines)


def render_summary(stats: DiffStats) -> str:
    return (
        f"identical: {stats.identical}  differences: {stats.differences}  "
        f"similarity: {stats.similarity}%"
    )


def _render_side(
    title: str,
    value,
    error: Optional[str],
    tree: Optional[DiffNode],
    compared: bool,
    options: CompareOptions,
) -> List[str]:
    lines = [f"{title}:"]
    if error:
        lines.append(f"  Error: {error}")
    elif not compared:
        if value is ABSENT:
            lines.append("  No data")
        else:
            # Standalone: nothing to compare against
            lines.extend(
                "  " + line
                for line in json.dumps(value, indent=2, ensure_ascii=False).splitlines()
            )
    elif tree is None:
        lines.append("  No differences" if options.search_term is None else "  No matches")
    else:
        lines.append(render_tree(tree))
    return lines


def render_comparison(
    comparison: Comparison,
    options: Optional[CompareOptions] = None,
    side: str = "both",
) -> str:
    """Render a comparison with its summary.

    Args:
        comparison: Result of compare() or compare_sides().
        options: Only-differences/search filtering; defaults to showing all.
        side: Which trees to show: "left", "right" or "both".
    """
    options = options or CompareOptions.default()
    lines: List[str] = []
    stats = comparison.stats
    if stats is not None:
        lines.append(render_summary(stats))
        lines.append("")

    left_tree = right_tree = None
    if comparison.compared:
        filtered = comparison.filtered(options)
        left_tree, right_tree = filtered.left, filtered.right

    if side in ("left", "both"):
        lines.extend(
            _render_side(
                "Left",
                comparison.left_value,
                comparison.left_error,
                left_tree,
                comparison.compared,
                options,
            )
        )
    if side == "both":
        lines.append("")
    if side in ("right", "both"):
        lines.extend(
            _render_side(
                "Right",
                comparison.right_value,
                comparison.right_error,
                right_tree,
                comparison.compared,
                options,
            )
        )
    return "\n".join(lines)
