"""Path resolution inside a JSON tree.

Paths are the coordinate system joining the two trees of a comparison: a
node is compared against whatever lives at the same path in the counterpart,
never by reference. Arrays are addressed like maps from "0", "1", ... to
their elements.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from .types import ABSENT

_INDEX_RE = re.compile(r"0|[1-9][0-9]*")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _array_index(segment: Any) -> Optional[int]:
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        return segment if segment >= 0 else None
    if isinstance(segment, str) and _INDEX_RE.fullmatch(segment):
        return int(segment)
    return None


def resolve(root: Any, path: Iterable[Any]) -> Any:
    """Return the value at *path* inside *root*, or ABSENT.

    Stops at the first segment that does not exist; never raises. A member
    whose value is null resolves to None, not ABSENT.
    """
    current = root
    for segment in path:
        if isinstance(current, dict):
            if segment not in current:
                return ABSENT
            current = current[segment]
        elif isinstance(current, (list, tuple)):
            idx = _array_index(segment)
            if idx is None or idx >= len(current):
                return ABSENT
            current = current[idx]
        else:
            return ABSENT
    return current


def path_exists(root: Any, path: Iterable[Any]) -> bool:
    return resolve(root, path) is not ABSENT


def format_path(path: Iterable[str], root: Any = ABSENT) -> str:
    """Render a path as ``$.a.b[0]``.

    With *root*, a segment is shown as an index when its parent in *root*
    is an array. Without it, any canonical index segment is shown as one.
    Keys that are not identifiers are shown as ``["key"]``.
    """
    out = "$"
    current = root
    for segment in path:
        if current is ABSENT:
            as_index = _array_index(segment) is not None
        else:
            as_index = isinstance(current, (list, tuple))
            current = resolve(current, (segment,))
        if as_index:
            out += f"[{segment}]"
        elif _IDENTIFIER_RE.fullmatch(segment):
            out += f".{segment}"
        else:
            escaped = segment.replace("\\", "\\\\").replace('"', '\\"')
            out += f'["{escaped}"]'
    return out
