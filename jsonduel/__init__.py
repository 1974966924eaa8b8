from .core import (
    ABSENT,
    Classification,
    CompareOptions,
    Comparison,
    DiffNode,
    DiffStats,
    SideResult,
    canonical_json,
    classify,
    compare,
    compare_sides,
    count_classifications,
    filter_tree,
    format_path,
    json_equal,
    list_changes,
    matches,
    path_exists,
    resolve,
)
from .errors import HistoryError, InputError, JsonDuelError
from .inputs import (
    DEFAULT_TIMEOUT,
    RequestConfig,
    fetch_json,
    fetch_pair,
    load_json_file,
    parse_json_strict,
    parse_json_text,
)
from .render import render_comparison, render_summary, render_tree
from .storage import HistoryEntry, HistoryStore
from .version import (
    DEFAULT_HISTORY_SCHEMA_VERSION,
    DEFAULT_JSONDUEL_VERSION,
    HISTORY_SCHEMA_VERSION,
    JSONDUEL_VERSION,
)

__all__ = [
    # Version
    "JSONDUEL_VERSION",
    "HISTORY_SCHEMA_VERSION",
    "DEFAULT_JSONDUEL_VERSION",
    "DEFAULT_HISTORY_SCHEMA_VERSION",
    # Core types
    "ABSENT",
    "Classification",
    "CompareOptions",
    "DiffNode",
    "DiffStats",
    "SideResult",
    # Canonicalization
    "canonical_json",
    "json_equal",
    # Path resolution
    "resolve",
    "path_exists",
    "format_path",
    # Classification
    "classify",
    "count_classifications",
    # Filtering and search
    "filter_tree",
    "matches",
    # Comparison
    "Comparison",
    "compare",
    "compare_sides",
    "list_changes",
    # Inputs
    "DEFAULT_TIMEOUT",
    "RequestConfig",
    "fetch_json",
    "fetch_pair",
    "load_json_file",
    "parse_json_strict",
    "parse_json_text",
    # Presentation
    "render_comparison",
    "render_summary",
    "render_tree",
    # Storage
    "HistoryEntry",
    "HistoryStore",
    # Exceptions
    "JsonDuelError",
    "InputError",
    "HistoryError",
]
