"""Tests for the comparison history store."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
import unittest

from jsonduel.core.types import ABSENT, DiffStats
from jsonduel.errors import HistoryError
from jsonduel.inputs import RequestConfig
from jsonduel.storage import HISTORY_LIMIT, HistoryStore
from jsonduel.version import (
    DEFAULT_HISTORY_SCHEMA_VERSION,
    DEFAULT_JSONDUEL_VERSION,
    HISTORY_SCHEMA_VERSION,
    JSONDUEL_VERSION,
)

LEFT = RequestConfig("api.test/v1/users", headers=(("Accept", "application/json"),))
RIGHT = RequestConfig("api.test/v2/users", method="POST", body='{"page": 1}')


class HistoryTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self._tmp.name, "history.db")

    def tearDown(self):
        self._tmp.cleanup()

    def _add(self, store, name, **kwargs):
        return store.add(name, LEFT, RIGHT, **kwargs)


class TestHistoryStore(HistoryTestCase):
    def test_add_and_get(self):
        store = HistoryStore(self.db_path)
        entry = self._add(
            store,
            "v1 vs v2",
            left_response={"users": [1]},
            right_response={"users": [1, 2]},
            left_status=200,
            right_status=201,
            stats=DiffStats(identical=1, differences=1),
        )

        loaded = store.get(entry.entry_id)
        self.assertEqual(loaded, entry)
        self.assertEqual(loaded.left_request, LEFT)
        self.assertEqual(loaded.right_request, RIGHT)
        self.assertEqual(loaded.right_response, {"users": [1, 2]})
        self.assertEqual(loaded.right_status, 201)
        self.assertEqual(loaded.stats.similarity, 50)
        self.assertEqual(loaded.jsonduel_version, JSONDUEL_VERSION)
        self.assertEqual(loaded.schema_version, HISTORY_SCHEMA_VERSION)

    def test_get_unknown(self):
        self.assertIsNone(HistoryStore(self.db_path).get("nope"))

    def test_list_newest_first(self):
        store = HistoryStore(self.db_path)
        for name in ("first", "second", "third"):
            self._add(store, name)
        self.assertEqual([e.name for e in store.list_entries()], ["third", "second", "first"])

    def test_persists_across_instances(self):
        entry = self._add(HistoryStore(self.db_path), "kept")
        self.assertEqual(HistoryStore(self.db_path).get(entry.entry_id).name, "kept")

    def test_default_limit(self):
        store = HistoryStore(self.db_path)
        for i in range(HISTORY_LIMIT + 5):
            self._add(store, f"run {i}")

        names = [e.name for e in store.list_entries()]
        self.assertEqual(len(names), HISTORY_LIMIT)
        self.assertEqual(names[0], f"run {HISTORY_LIMIT + 4}")
        self.assertEqual(names[-1], "run 5")

    def test_evicts_oldest_inserted_not_least_recently_read(self):
        store = HistoryStore(self.db_path, limit=3)
        a = self._add(store, "a")
        self._add(store, "b")
        self._add(store, "c")
        store.get(a.entry_id)
        self._add(store, "d")

        self.assertEqual([e.name for e in store.list_entries()], ["d", "c", "b"])
        self.assertIsNone(store.get(a.entry_id))

    def test_invalid_limit(self):
        with self.assertRaises(HistoryError):
            HistoryStore(self.db_path, limit=0)

    def test_null_response_is_not_missing(self):
        store = HistoryStore(self.db_path)
        entry = self._add(store, "nulls", left_response=None)

        loaded = store.get(entry.entry_id)
        self.assertIsNone(loaded.left_response)
        self.assertIs(loaded.right_response, ABSENT)
        data = loaded.to_dict()
        self.assertIn("response1", data)
        self.assertNotIn("response2", data)

    def test_update_stats(self):
        store = HistoryStore(self.db_path)
        entry = self._add(store, "x")

        self.assertTrue(store.update_stats(entry.entry_id, DiffStats(identical=2)))
        self.assertEqual(store.get(entry.entry_id).stats, DiffStats(identical=2))
        self.assertFalse(store.update_stats("nope", DiffStats()))

    def test_remove_and_clear(self):
        store = HistoryStore(self.db_path)
        a = self._add(store, "a")
        b = self._add(store, "b")

        self.assertTrue(store.remove(a.entry_id))
        self.assertFalse(store.remove(a.entry_id))
        self.assertEqual([e.entry_id for e in store.list_entries()], [b.entry_id])

        self.assertTrue(store.clear())
        self.assertEqual(store.list_entries(), [])
        self.assertFalse(store.clear())

    def test_to_dict_keys(self):
        entry = self._add(HistoryStore(self.db_path), "x", left_status=200)
        data = entry.to_dict()
        self.assertEqual(data["request1"]["url"], LEFT.url)
        self.assertEqual(data["request2"]["method"], "POST")
        self.assertEqual(data["leftStatus"], 200)
        self.assertIsNone(data["rightStatus"])
        self.assertIsNone(data["stats"])


class TestUnavailableStore(HistoryTestCase):
    def test_directory_path_degrades_to_no_op(self):
        with self.assertLogs("jsonduel.storage.history", level="WARNING"):
            store = HistoryStore(self._tmp.name)

        self.assertFalse(store.available)
        self.assertIsNone(self._add(store, "x"))
        self.assertEqual(store.list_entries(), [])
        self.assertIsNone(store.get("x"))
        self.assertFalse(store.remove("x"))
        self.assertFalse(store.update_stats("x", DiffStats()))
        self.assertFalse(store.clear())


class TestMigration(HistoryTestCase):
    def test_old_database_gains_version_columns(self):
        conn = sqlite3.connect(self.db_path)
        with conn:
            conn.execute(
                """
                CREATE TABLE comparisons (
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
            conn.execute(
                """
                INSERT INTO comparisons
                (entry_id, name, created_at, left_request, right_request, left_response)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    "old1",
                    "legacy",
                    "2024-01-01T00:00:00+00:00",
                    json.dumps({"url": "a.test"}),
                    json.dumps({"url": "b.test"}),
                    json.dumps([1, 2]),
                ),
            )
        conn.close()

        store = HistoryStore(self.db_path)
        entry = store.get("old1")

        self.assertEqual(entry.name, "legacy")
        self.assertEqual(entry.left_request.method, "GET")
        self.assertEqual(entry.left_response, [1, 2])
        self.assertIs(entry.right_response, ABSENT)
        self.assertEqual(entry.jsonduel_version, DEFAULT_JSONDUEL_VERSION)
        self.assertEqual(entry.schema_version, DEFAULT_HISTORY_SCHEMA_VERSION)

        # New rows in the migrated table carry versions
        new = self._add(store, "fresh")
        self.assertEqual(store.get(new.entry_id).schema_version, HISTORY_SCHEMA_VERSION)


if __name__ == "__main__":
    unittest.main()
