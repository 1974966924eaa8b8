"""
Comparison history.

Local-first, boring storage for past comparisons: the two request
configurations, the captured responses and the last computed statistics.
Only the most recent entries are kept; the oldest inserted entry is evicted
first, no matter how recently it was read.

Storage is a convenience. Every failure is logged and turned into a no-op so
that a broken or unwritable database never blocks a comparison.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.types import ABSENT, DiffStats
from ..errors import HistoryError
from ..inputs import RequestConfig
from ..version import (
    DEFAULT_HISTORY_SCHEMA_VERSION,
    DEFAULT_JSONDUEL_VERSION,
    HISTORY_SCHEMA_VERSION,
    JSONDUEL_VERSION,
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50
DEFAULT_DB_PATH = "jsonduel.db"

_STORAGE_ERRORS = (sqlite3.Error, OSError)


@dataclass(frozen=True)
class HistoryEntry:
    """
    A saved comparison.

    Attributes:
        entry_id: Opaque identifier
        name: Human-readable label
        created_at: ISO8601 UTC timestamp of insertion
        left_request: Request configuration of the left side
        right_request: Request configuration of the right side
        left_response: Captured left document, or ABSENT
        right_response: Captured right document, or ABSENT
        left_status: HTTP status of the left response
        right_status: HTTP status of the right response
        stats: Last computed statistics
        jsonduel_version: Version of jsonduel that saved the entry
        schema_version: History format version
    """

    entry_id: str
    name: str
    created_at: str
    left_request: RequestConfig
    right_request: RequestConfig
    left_response: Any = ABSENT
    right_response: Any = ABSENT
    left_status: Optional[int] = None
    right_status: Optional[int] = None
    stats: Optional[DiffStats] = None
    jsonduel_version: Optional[str] = None
    schema_version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.entry_id,
            "name": self.name,
            "created_at": self.created_at,
            "request1": self.left_request.to_dict(),
            "request2": self.right_request.to_dict(),
            "leftStatus": self.left_status,
            "rightStatus": self.right_status,
            "stats": self.stats.to_dict() if self.stats else None,
            "jsonduel_version": self.jsonduel_version,
            "schema_version": self.schema_version,
        }
        if self.left_response is not ABSENT:
            result["response1"] = self.left_response
        if self.right_response is not ABSENT:
            result["response2"] = self.right_response
        return result


def _dump_response(value: Any) -> Optional[str]:
    if value is ABSENT:
        return None
    return json.dumps(value)


def _load_response(text: Optional[str]) -> Any:
    if text is None:
        return ABSENT
    return json.loads(text)


@dataclass
class HistoryStore:
    path: str = DEFAULT_DB_PATH
    limit: int = HISTORY_LIMIT
    _available: bool = field(default=True, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise HistoryError(f"limit must be positive, got {self.limit}", path=self.path)
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            self._init_db()
        except _STORAGE_ERRORS as e:
            logger.warning("History storage unavailable at %s: %s", self.path, e)
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS comparisons (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry_id TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    left_request TEXT NOT NULL,
                    right_request TEXT NOT NULL,
                    left_response TEXT,
                    right_response TEXT,
                    left_status INTEGER,
                    right_status INTEGER,
                    stats TEXT
                )
                """
            )

            # Migration: add version columns if they don't exist (for older DBs)
            self._migrate_add_version_columns(conn)

    def _migrate_add_version_columns(self, conn: sqlite3.Connection) -> None:
        """Migration: add version columns to databases written before they existed."""
        columns = {row["name"] for row in conn.execute("PRAGMA table_info(comparisons)")}
        if "jsonduel_version" not in columns:
            conn.execute("ALTER TABLE comparisons ADD COLUMN jsonduel_version TEXT")
        if "schema_version" not in columns:
            conn.execute("ALTER TABLE comparisons ADD COLUMN schema_version TEXT")

    def _utc_now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def add(
        self,
        name: str,
        left_request: RequestConfig,
        right_request: RequestConfig,
        *,
        left_response: Any = ABSENT,
        right_response: Any = ABSENT,
        left_status: Optional[int] = None,
        right_status: Optional[int] = None,
        stats: Optional[DiffStats] = None,
    ) -> Optional[HistoryEntry]:
        """
        Save a comparison, then evict the oldest entries beyond the limit.

        Returns:
            The saved entry, or None if storage is unavailable
        """
        if not self._available:
            return None

        entry = HistoryEntry(
            entry_id=uuid.uuid4().hex,
            name=name,
            created_at=self._utc_now(),
            left_request=left_request,
            right_request=right_request,
            left_response=left_response,
            right_response=right_response,
            left_status=left_status,
            right_status=right_status,
            stats=stats,
            jsonduel_version=JSONDUEL_VERSION,
            schema_version=HISTORY_SCHEMA_VERSION,
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO comparisons
                    (entry_id, name, created_at, left_request, right_request,
                     left_response, right_response, left_status, right_status,
                     stats, jsonduel_version, schema_version)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        entry.entry_id,
                        entry.name,
                        entry.created_at,
                        json.dumps(left_request.to_dict()),
                        json.dumps(right_request.to_dict()),
                        _dump_response(left_response),
                        _dump_response(right_response),
                        left_status,
                        right_status,
                        json.dumps(stats.to_dict()) if stats else None,
                        entry.jsonduel_version,
                        entry.schema_version,
                    ),
                )
                conn.execute(
                    """
                    DELETE FROM comparisons
                    WHERE seq NOT IN (
                        SELECT seq FROM comparisons ORDER BY seq DESC LIMIT ?
                    )
                    """,
                    (self.limit,),
                )
        except _STORAGE_ERRORS as e:
            logger.warning("Could not save comparison %r: %s", name, e)
            return None
        return entry

    def _row_to_entry(self, row: sqlite3.Row) -> HistoryEntry:
        # Backward compatibility: use defaults for rows written without versions
        jsonduel_version = row["jsonduel_version"] or DEFAULT_JSONDUEL_VERSION
        schema_version = row["schema_version"] or DEFAULT_HISTORY_SCHEMA_VERSION
        stats = DiffStats.from_dict(json.loads(row["stats"])) if row["stats"] else None
        return HistoryEntry(
            entry_id=row["entry_id"],
            name=row["name"],
            created_at=row["created_at"],
            left_request=RequestConfig.from_dict(json.loads(row["left_request"])),
            right_request=RequestConfig.from_dict(json.loads(row["right_request"])),
            left_response=_load_response(row["left_response"]),
            right_response=_load_response(row["right_response"]),
            left_status=row["left_status"],
            right_status=row["right_status"],
            stats=stats,
            jsonduel_version=jsonduel_version,
            schema_version=schema_version,
        )

    def list_entries(self) -> List[HistoryEntry]:
        """All saved entries, newest first."""
        if not self._available:
            return []
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT * FROM comparisons ORDER BY seq DESC"
                ).fetchall()
            return [self._row_to_entry(row) for row in rows]
        except (*_STORAGE_ERRORS, ValueError) as e:
            logger.warning("Could not read history from %s: %s", self.path, e)
            return []

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        if not self._available:
            return None
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM comparisons WHERE entry_id = ?",
                    (entry_id,),
                ).fetchone()
            return self._row_to_entry(row) if row is not None else None
        except (*_STORAGE_ERRORS, ValueError) as e:
            logger.warning("Could not read history entry %s: %s", entry_id, e)
            return None

    def _write(self, action: str, sql: str, params: tuple = ()) -> bool:
        if not self._available:
            return False
        try:
            with self._connect() as conn:
                cursor = conn.execute(sql, params)
            return cursor.rowcount > 0
        except _STORAGE_ERRORS as e:
            logger.warning("Could not %s in %s: %s", action, self.path, e)
            return False

    def update_stats(self, entry_id: str, stats: DiffStats) -> bool:
        """Replace the stored statistics of an entry. Returns False if nothing was updated."""
        return self._write(
            "update statistics",
            "UPDATE comparisons SET stats = ? WHERE entry_id = ?",
            (json.dumps(stats.to_dict()), entry_id),
        )

    def remove(self, entry_id: str) -> bool:
        return self._write(
            "remove entry",
            "DELETE FROM comparisons WHERE entry_id = ?",
            (entry_id,),
        )

    def clear(self) -> bool:
        """Delete every entry. Returns True if anything was deleted."""
        return self._write("clear history", "DELETE FROM comparisons")
