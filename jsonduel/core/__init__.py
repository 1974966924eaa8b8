"""Core types and diff engine for jsonduel."""

from .canon import canonical_json, display_text, json_equal
from .changes import list_changes
from .classify import (
    classify,
    count_classifications,
    fills_empty_counterpart,
    leaf_units,
)
from .compare import Comparison, FilteredComparison, compare, compare_sides
from .filtering import apply_options, filter_tree, matches, search_paths
from .resolve import format_path, path_exists, resolve
from .types import (
    ABSENT,
    Classification,
    CompareOptions,
    DiffNode,
    DiffStats,
    Path,
    SideResult,
    is_composite,
    kind_of,
)

__all__ = [
    # Core types
    "ABSENT",
    "Classification",
    "CompareOptions",
    "DiffNode",
    "DiffStats",
    "Path",
    "SideResult",
    "is_composite",
    "kind_of",
    # Canonicalization
    "canonical_json",
    "display_text",
    "json_equal",
    # Path resolution
    "resolve",
    "path_exists",
    "format_path",
    # Classification
    "classify",
    "count_classifications",
    "fills_empty_counterpart",
    "leaf_units",
    # Filtering and search
    "filter_tree",
    "apply_options",
    "matches",
    "search_paths",
    # Comparison
    "Comparison",
    "FilteredComparison",
    "compare",
    "compare_sides",
    "list_changes",
]
