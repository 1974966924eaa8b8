"""Two-sided comparison of JSON documents.

The left document is walked against the right, then the right against the
left in a mirrored pass. Each pass folds its own counts; nothing is shared
between them, so they could run independently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .classify import classify, fills_empty_counterpart
from .filtering import apply_options
from .types import (
    ABSENT,
    Classification,
    CompareOptions,
    DiffNode,
    DiffStats,
    SideResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Comparison:
    """
    Result of comparing two documents.

    Attributes:
        left_value: Left document, or ABSENT
        right_value: Right document, or ABSENT
        left_error: Why the left document is missing, if it is
        right_error: Why the right document is missing, if it is
        left: Left document classified against the right (None when either
              side is missing)
        right: Right document classified against the left, mirrored
    """

    left_value: Any = ABSENT
    right_value: Any = ABSENT
    left_error: Optional[str] = None
    right_error: Optional[str] = None
    left: Optional[DiffNode] = None
    right: Optional[DiffNode] = None

    @property
    def compared(self) -> bool:
        """True when both sides had a document and the engine ran."""
        return self.left is not None and self.right is not None

    @property
    def added(self) -> int:
        """Leaf units only present on the right.

        Members of a container that is empty on the left are left out: the
        left pass already counts them against the empty container.
        """
        if self.right is None:
            return 0
        count = 0
        stack = [self.right]
        while stack:
            node = stack.pop()
            if fills_empty_counterpart(node):
                # Counted on the left, where the empty container faces it
                continue
            if node.classification == Classification.ADDED and not node.children:
                count += 1
            else:
                stack.extend(node.children)
        return count

    @property
    def stats(self) -> Optional[DiffStats]:
        """Statistics over both passes; None when the engine did not run.

        Identical and modified/removed units come from the left pass, added
        units from the mirrored pass.
        """
        if not self.compared:
            return None
        return DiffStats(
            identical=self.left.identical,
            differences=self.left.differences + self.added,
        )

    def is_identical(self) -> bool:
        stats = self.stats
        return stats is not None and stats.differences == 0

    def filtered(self, options: CompareOptions) -> "FilteredComparison":
        """Apply only-differences/search options to both trees."""
        left = apply_options(self.left, options) if self.left else None
        right = apply_options(self.right, options) if self.right else None
        return FilteredComparison(comparison=self, options=options, left=left, right=right)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        stats = self.stats
        return {
            "compared": self.compared,
            "left_error": self.left_error,
            "right_error": self.right_error,
            "stats": stats.to_dict() if stats else None,
            "left": self.left.to_dict() if self.left else None,
            "right": self.right.to_dict() if self.right else None,
        }


@dataclass(frozen=True)
class FilteredComparison:
    """Trees of a comparison after filtering. Statistics stay those of the full pass."""

    comparison: Comparison
    options: CompareOptions
    left: Optional[DiffNode]
    right: Optional[DiffNode]

    @property
    def stats(self) -> Optional[DiffStats]:
        return self.comparison.stats


def compare(left: Any, right: Any) -> Comparison:
    """Compare two JSON documents."""
    left_tree = classify(left, (), right)
    right_tree = classify(right, (), left, mirrored=True)
    result = Comparison(
        left_value=left,
        right_value=right,
        left=left_tree,
        right=right_tree,
    )
    stats = result.stats
    logger.debug(
        "Compared documents: %d identical, %d differences, %d%% similar",
        stats.identical,
        stats.differences,
        stats.similarity,
    )
    return result


def compare_sides(left: SideResult, right: SideResult) -> Comparison:
    """Compare two loaded sides, each of which may carry an error instead of a value.

    The engine only runs when both sides have a document; otherwise the
    surviving side is kept as a standalone value.
    """
    if left.ok and right.ok:
        return compare(left.value, right.value)
    logger.debug(
        "Skipping comparison: left_error=%r right_error=%r", left.error, right.error
    )
    return Comparison(
        left_value=left.value,
        right_value=right.value,
        left_error=None if left.ok else (left.error or "No data"),
        right_error=None if right.ok else (right.error or "No data"),
    )
