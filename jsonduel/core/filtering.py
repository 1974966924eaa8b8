"""Only-show-differences filtering and text search over classified trees.

Filtering never reclassifies and never recounts: a pruned tree keeps the
statistics of the full pass it came from.

Rules:
- A child is wanted when differences are requested and it (or a
  descendant) is not unchanged, or when a search is active and it (or a
  descendant) matches the term.
- A wanted node is kept whole when it is itself a difference, matches
  through its own label or text, has no children, or matches the search
  while none of its children does (a term spanning several members).
- Otherwise its children are filtered in turn; a container left without
  children is dropped, up to and including the root.

Search matches are computed once per tree, bottom-up over a single
canonical serialization, so deep documents never recurse.
"""

from __future__ import annotations

import json
from bisect import bisect_left
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .canon import canonical_json, display_text
from .types import Classification, CompareOptions, DiffNode


def _normalize(term: Optional[str]) -> Optional[str]:
    return CompareOptions(search=term).search_term


def _own_match(node: DiffNode, term: str) -> bool:
    if node.key is not None and term in node.key.lower():
        return True
    if not node.children:
        return term in display_text(node.value).lower()
    return False


def _serialize(
    root: DiffNode,
) -> Tuple[str, List[DiffNode], List[int], List[Tuple[int, int]]]:
    """Lowercased canonical text of *root* and the span of every node in it.

    Returns:
        (text, nodes in pre-order, parent index per node, (start, end) per node)
    """
    pieces: List[str] = []
    pos = 0
    nodes: List[DiffNode] = []
    parents: List[int] = []
    starts: List[int] = []
    ends: List[int] = []

    # Items: ("node", node, parent) | ("text", piece) | ("end", index)
    stack: List[tuple] = [("node", root, -1)]
    while stack:
        item = stack.pop()
        if item[0] == "text":
            pieces.append(item[1])
            pos += len(item[1])
            continue
        if item[0] == "end":
            ends[item[1]] = pos
            continue

        node, parent = item[1], item[2]
        idx = len(nodes)
        nodes.append(node)
        parents.append(parent)
        starts.append(pos)
        ends.append(pos)

        if not node.children:
            piece = canonical_json(node.value).lower()
            pieces.append(piece)
            pos += len(piece)
            ends[idx] = pos
            continue

        is_object = node.kind == "object"
        children = sorted(node.children, key=lambda c: c.key) if is_object else node.children
        stack.append(("end", idx))
        stack.append(("text", "}" if is_object else "]"))
        for i in range(len(children) - 1, -1, -1):
            child = children[i]
            stack.append(("node", child, idx))
            prefix = "," if i else ""
            if is_object:
                prefix += json.dumps(child.key, ensure_ascii=False).lower() + ":"
            if prefix:
                stack.append(("text", prefix))
        stack.append(("text", "{" if is_object else "["))

    spans = list(zip(starts, ends))
    return "".join(pieces), nodes, parents, spans


def _subtree_matches(root: DiffNode, term: str) -> Dict[int, bool]:
    """Map id(node) -> whether the node or anything below it matches *term*."""
    text, nodes, parents, spans = _serialize(root)

    hits: List[int] = []
    at = text.find(term)
    while at >= 0:
        hits.append(at)
        at = text.find(term, at + 1)

    found = [False] * len(nodes)
    for idx in range(len(nodes) - 1, -1, -1):
        if not found[idx]:
            start, end = spans[idx]
            first = bisect_left(hits, start)
            in_span = first < len(hits) and hits[first] + len(term) <= end
            found[idx] = in_span or _own_match(nodes[idx], term)
        if found[idx] and parents[idx] >= 0:
            found[parents[idx]] = True
    return {id(n): f for n, f in zip(nodes, found)}


def matches(node: DiffNode, term: Optional[str]) -> bool:
    """Case-insensitive text match of *term* against a node.

    A node matches through its key/index label, its primitive text, or (for
    containers) anywhere in the canonical serialization of its subtree or
    in the label of any descendant. A blank term matches nothing.
    """
    term = _normalize(term)
    if term is None:
        return False
    return _subtree_matches(node, term)[id(node)]


def _wanted(node: DiffNode, only_differences: bool, found: Dict[int, bool]) -> bool:
    if only_differences and node.has_differences:
        return True
    return found.get(id(node), False)


def _keep_whole(
    node: DiffNode,
    only_differences: bool,
    term: Optional[str],
    found: Dict[int, bool],
) -> bool:
    if not node.children:
        return True
    if only_differences and node.classification != Classification.UNCHANGED:
        return True
    if term is None or not found.get(id(node), False):
        return False
    if _own_match(node, term):
        return True
    # The match spans members: no single child carries it
    return not any(found.get(id(c), False) for c in node.children)


def filter_tree(
    node: DiffNode,
    *,
    only_differences: bool = False,
    search: Optional[str] = None,
) -> Optional[DiffNode]:
    """Prune *node* to differences and/or search matches.

    Returns:
        The pruned tree, the node itself when no filter is active, or None
        when nothing is left to show.
    """
    term = _normalize(search)
    if not only_differences and term is None:
        return node
    found = _subtree_matches(node, term) if term is not None else {}
    if not _wanted(node, only_differences, found):
        return None

    # Pre-order: (node, parent index, kept whole)
    frames: List[Tuple[DiffNode, int, bool]] = []
    stack: List[Tuple[DiffNode, int]] = [(node, -1)]
    while stack:
        current, parent = stack.pop()
        whole = _keep_whole(current, only_differences, term, found)
        idx = len(frames)
        frames.append((current, parent, whole))
        if whole:
            continue
        for child in reversed(current.children):
            if _wanted(child, only_differences, found):
                stack.append((child, idx))

    # Post-order: rebuild containers from their retained children
    kept: Dict[int, List[DiffNode]] = {}
    result: Optional[DiffNode] = None
    for idx in range(len(frames) - 1, -1, -1):
        current, parent, whole = frames[idx]
        if whole:
            filtered: Optional[DiffNode] = current
        else:
            children = kept.pop(idx, [])
            children.reverse()
            filtered = replace(current, children=tuple(children)) if children else None
        if parent < 0:
            result = filtered
        elif filtered is not None:
            kept.setdefault(parent, []).append(filtered)
    return result


def apply_options(node: DiffNode, options: CompareOptions) -> Optional[DiffNode]:
    return filter_tree(
        node, only_differences=options.only_differences, search=options.search
    )


def search_paths(node: DiffNode, term: Optional[str]) -> List[Tuple[str, ...]]:
    """Paths of every node matching *term* through its own label or text."""
    term = _normalize(term)
    if term is None:
        return []
    return [n.path for n in node.walk() if _own_match(n, term)]
