"""Storage implementations for jsonduel."""

from .history import DEFAULT_DB_PATH, HISTORY_LIMIT, HistoryEntry, HistoryStore

__all__ = [
    "DEFAULT_DB_PATH",
    "HISTORY_LIMIT",
    "HistoryEntry",
    "HistoryStore",
]
