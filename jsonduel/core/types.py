from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

Path = Tuple[str, ...]


class _Absent:
    """Marker for "no value at this path" (distinct from JSON null)."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


class Classification(str, Enum):
    """Per-node outcome of comparing a value against its counterpart."""

    UNCHANGED = "unchanged"
    MODIFIED = "modified"
    REMOVED = "removed"
    ADDED = "added"


def kind_of(value: Any) -> str:
    """JSON kind of a value: object, array, string, number, boolean or null."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    raise TypeError(f"not a JSON value: {type(value).__name__}")


def is_composite(value: Any) -> bool:
    return isinstance(value, (dict, list, tuple))


@dataclass(frozen=True)
class DiffStats:
    """
    Aggregate counts over one comparison pass.

    Attributes:
        identical: Leaf units classified unchanged
        differences: Leaf units classified modified, removed or added
    """

    identical: int = 0
    differences: int = 0

    @property
    def total(self) -> int:
        return self.identical + self.differences

    @property
    def similarity(self) -> int:
        """Percentage of unchanged units, rounded half up; 0 for an empty pass."""
        total = self.total
        if total == 0:
            return 0
        return (200 * self.identical + total) // (2 * total)

    def __add__(self, other: "DiffStats") -> "DiffStats":
        return DiffStats(
            identical=self.identical + other.identical,
            differences=self.differences + other.differences,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "identical": self.identical,
            "differences": self.differences,
            "similarity": self.similarity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiffStats":
        return cls(
            identical=int(data.get("identical", 0)),
            differences=int(data.get("differences", 0)),
        )


@dataclass(frozen=True)
class DiffNode:
    """
    One classified location of a JSON tree.

    Attributes:
        path: Segments leading from the root to this node
        key: Member name or array index label (None at the root)
        kind: JSON kind of the value at this node
        value: The value in the tree being walked
        counterpart: Value at the same path in the other tree, or ABSENT
        classification: Outcome for this node
        children: Classified members/elements, in document order
        identical: Unchanged leaf units in this subtree
        differences: Differing leaf units in this subtree
    """

    path: Path
    key: Optional[str]
    kind: str
    value: Any
    counterpart: Any
    classification: Classification
    children: Tuple["DiffNode", ...] = field(default_factory=tuple)
    identical: int = 0
    differences: int = 0

    @property
    def is_composite(self) -> bool:
        return self.kind in ("object", "array")

    @property
    def has_differences(self) -> bool:
        """True if this node or any descendant is not unchanged."""
        return (
            self.classification != Classification.UNCHANGED or self.differences > 0
        )

    @property
    def stats(self) -> DiffStats:
        return DiffStats(identical=self.identical, differences=self.differences)

    def find(self, path: Tuple[str, ...]) -> Optional["DiffNode"]:
        """Return the descendant node at *path*, or None if it is not in this tree."""
        node: DiffNode = self
        for segment in path[len(self.path) :]:
            for child in node.children:
                if child.key == segment:
                    node = child
                    break
            else:
                return None
        return node

    def walk(self):
        """Yield this node and its descendants in document (pre-)order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization. Leaf values only, no raw subtrees."""
        result: Dict[str, Any] = {
            "path": list(self.path),
            "key": self.key,
            "kind": self.kind,
            "classification": self.classification.value,
            "identical": self.identical,
            "differences": self.differences,
        }
        if self.is_composite:
            result["children"] = [c.to_dict() for c in self.children]
        else:
            result["value"] = self.value
            if self.counterpart is not ABSENT and not is_composite(self.counterpart):
                result["counterpart"] = self.counterpart
        return result


@dataclass(frozen=True)
class SideResult:
    """
    One side of a comparison as handed to the engine: a value or an error.

    Attributes:
        value: Parsed JSON document, or ABSENT when loading failed
        error: Why no value is available (None on success)
        status: HTTP status code when the document was fetched
    """

    value: Any = ABSENT
    error: Optional[str] = None
    status: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not ABSENT

    @classmethod
    def success(cls, value: Any, status: Optional[int] = None) -> "SideResult":
        return cls(value=value, error=None, status=status)

    @classmethod
    def failure(cls, error: str, status: Optional[int] = None) -> "SideResult":
        return cls(value=ABSENT, error=error, status=status)


@dataclass(frozen=True)
class CompareOptions:
    """
    Presentation-time filtering of a comparison.

    Attributes:
        only_differences: Prune subtrees without differences.
        search: Case-insensitive text to look for; blank means no search.
    """

    only_differences: bool = False
    search: Optional[str] = None

    @property
    def search_term(self) -> Optional[str]:
        """Normalized search term, or None when no search is active."""
        if self.search is None:
            return None
        term = self.search.strip().lower()
        return term or None

    @property
    def active(self) -> bool:
        return self.only_differences or self.search_term is not None

    @classmethod
    def default(cls) -> "CompareOptions":
        """Show everything."""
        return cls()

    @classmethod
    def differences_only(cls, search: Optional[str] = None) -> "CompareOptions":
        """Show only differing nodes (and search matches, if a term is given)."""
        return cls(only_differences=True, search=search)
