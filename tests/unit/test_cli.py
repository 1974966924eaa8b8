"""Tests for the jsonduel command-line interface."""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from jsonduel.cli import EXIT_DIFFERENT, EXIT_IDENTICAL, EXIT_UNAVAILABLE, main
from jsonduel.core.types import DiffStats, SideResult
from jsonduel.inputs import RequestConfig
from jsonduel.storage import HistoryStore


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmp.name
        self.db_path = os.path.join(self.tmpdir, "history.db")

    def tearDown(self):
        self._tmp.cleanup()

    def write_json(self, name, value):
        path = os.path.join(self.tmpdir, name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(value, f)
        return path

    def run_cli(self, *argv):
        """Run main() and return (exit code, stdout, stderr)."""
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            with self.assertRaises(SystemExit) as ctx:
                main(list(argv))
        return ctx.exception.code, out.getvalue(), err.getvalue()


class TestDiffCommand(CliTestCase):
    def test_identical_documents(self):
        left = self.write_json("a.json", {"x": [1, 2]})
        right = self.write_json("b.json", {"x": [1, 2]})

        code, out, _ = self.run_cli("diff", left, right)
        self.assertEqual(code, EXIT_IDENTICAL)
        self.assertIn("similarity: 100%", out)

    def test_differing_documents(self):
        left = self.write_json("a.json", {"name": "Alice", "age": 30})
        right = self.write_json("b.json", {"name": "Alice", "age": 31})

        code, out, _ = self.run_cli("diff", left, right, "--only-diff")
        self.assertEqual(code, EXIT_DIFFERENT)
        self.assertIn("similarity: 50%", out)
        self.assertIn('"age": 30 -> 31', out)
        self.assertNotIn('"name"', out)

    def test_json_format(self):
        left = self.write_json("a.json", {"a": 1})
        right = self.write_json("b.json", {"a": 1, "b": 2})

        code, out, _ = self.run_cli("diff", left, right, "--format", "json")
        payload = json.loads(out)
        self.assertEqual(code, EXIT_DIFFERENT)
        self.assertEqual(payload["stats"], {"identical": 1, "differences": 1, "similarity": 50})
        self.assertEqual(payload["changes"], [{"op": "added", "path": "$.b", "value": 2}])

    def test_unreadable_side(self):
        left = self.write_json("a.json", {"a": 1})
        right = os.path.join(self.tmpdir, "bad.json")
        with open(right, "w", encoding="utf-8") as f:
            f.write("{not json")

        code, out, _ = self.run_cli("diff", left, right)
        self.assertEqual(code, EXIT_UNAVAILABLE)
        self.assertIn("Error: Invalid JSON", out)
        self.assertIn('"a": 1', out)

    def test_stdin_for_both_sides_rejected(self):
        with mock.patch("jsonduel.cli.load_json_file") as load:
            code, out, err = self.run_cli("diff", "-", "-")

        self.assertEqual(code, EXIT_UNAVAILABLE)
        self.assertIn("standard input", err)
        self.assertEqual(out, "")
        load.assert_not_called()

    def test_stdin_for_one_side(self):
        right = self.write_json("b.json", {"a": 1})
        with mock.patch("sys.stdin", io.StringIO('{"a": 1}')):
            code, _, _ = self.run_cli("diff", "-", right)
        self.assertEqual(code, EXIT_IDENTICAL)

    def test_no_command_prints_help(self):
        code, out, _ = self.run_cli()
        self.assertEqual(code, EXIT_UNAVAILABLE)
        self.assertIn("usage:", out)


class TestFetchCommand(CliTestCase):
    def test_fetch_saves_history(self):
        sides = (
            SideResult.success({"v": 1}, status=200),
            SideResult.success({"v": 2}, status=200),
        )
        with mock.patch("jsonduel.cli.fetch_pair", return_value=sides) as fetch:
            code, out, err = self.run_cli(
                "fetch",
                "a.test/x",
                "b.test/x",
                "-X",
                "post",
                "-H",
                "Accept: application/json",
                "--data",
                "{}",
                "--db",
                self.db_path,
            )

        self.assertEqual(code, EXIT_DIFFERENT)
        left_config, right_config = fetch.call_args.args
        self.assertEqual(left_config.method, "POST")
        self.assertEqual(right_config.headers, (("Accept", "application/json"),))
        self.assertIn("Saved as", err)

        entries = HistoryStore(self.db_path).list_entries()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].name, "a.test/x vs b.test/x")
        self.assertEqual(entries[0].right_response, {"v": 2})
        self.assertEqual(entries[0].stats, DiffStats(identical=0, differences=1))

    def test_fetch_no_save(self):
        sides = (SideResult.success([]), SideResult.failure("HTTP status 503", status=503))
        with mock.patch("jsonduel.cli.fetch_pair", return_value=sides):
            code, out, _ = self.run_cli(
                "fetch", "a.test", "b.test", "--no-save", "--db", self.db_path
            )

        self.assertEqual(code, EXIT_UNAVAILABLE)
        self.assertIn("Error: HTTP status 503", out)
        self.assertEqual(HistoryStore(self.db_path).list_entries(), [])

    def test_invalid_header(self):
        with mock.patch("jsonduel.cli.fetch_pair") as fetch:
            code, _, err = self.run_cli("fetch", "a", "b", "-H", "broken", "--db", self.db_path)
        self.assertEqual(code, EXIT_UNAVAILABLE)
        self.assertIn("Invalid header", err)
        fetch.assert_not_called()


class TestHistoryCommands(CliTestCase):
    def _save(self, left_response, right_response, stats=None):
        store = HistoryStore(self.db_path)
        return store.add(
            "saved",
            RequestConfig("a.test"),
            RequestConfig("b.test"),
            left_response=left_response,
            right_response=right_response,
            stats=stats,
        )

    def test_list_empty(self):
        code, out, _ = self.run_cli("history", "list", "--db", self.db_path)
        self.assertEqual(code, EXIT_IDENTICAL)
        self.assertIn("No saved comparisons", out)

    def test_list(self):
        entry = self._save({"a": 1}, {"a": 1}, stats=DiffStats(identical=1))
        code, out, _ = self.run_cli("history", "list", "--db", self.db_path)
        self.assertEqual(code, EXIT_IDENTICAL)
        self.assertIn(entry.entry_id, out)
        self.assertIn("100% similar", out)

    def test_show_recomputes_stats(self):
        entry = self._save({"a": 1, "b": 2}, {"a": 1}, stats=DiffStats(identical=9))

        code, out, _ = self.run_cli("history", "show", entry.entry_id, "--db", self.db_path)
        self.assertEqual(code, EXIT_DIFFERENT)
        self.assertIn("similarity: 50%", out)
        self.assertEqual(
            HistoryStore(self.db_path).get(entry.entry_id).stats,
            DiffStats(identical=1, differences=1),
        )

    def test_show_missing_response(self):
        entry = self._save({"a": 1}, None)
        store = HistoryStore(self.db_path)
        missing = store.add("partial", RequestConfig("a"), RequestConfig("b"), left_response=[1])

        code, _, _ = self.run_cli("history", "show", entry.entry_id, "--db", self.db_path)
        self.assertEqual(code, EXIT_DIFFERENT)

        code, out, _ = self.run_cli("history", "show", missing.entry_id, "--db", self.db_path)
        self.assertEqual(code, EXIT_UNAVAILABLE)
        self.assertIn("No response captured", out)

    def test_show_unknown_entry(self):
        code, _, err = self.run_cli("history", "show", "nope", "--db", self.db_path)
        self.assertEqual(code, EXIT_UNAVAILABLE)
        self.assertIn("not found", err)

    def test_rerun_fetches_saved_requests(self):
        entry = self._save({"a": 1}, {"a": 1})
        sides = (SideResult.success({"a": 1}), SideResult.success({"a": 1}))
        with mock.patch("jsonduel.cli.fetch_pair", return_value=sides) as fetch:
            code, _, _ = self.run_cli("history", "rerun", entry.entry_id, "--db", self.db_path)

        self.assertEqual(code, EXIT_IDENTICAL)
        left_config, right_config = fetch.call_args.args
        self.assertEqual(left_config.url, "a.test")
        self.assertEqual(right_config.url, "b.test")
        self.assertEqual(len(HistoryStore(self.db_path).list_entries()), 2)

    def test_rm_and_clear(self):
        entry = self._save(1, 1)
        self._save(2, 2)

        code, _, _ = self.run_cli("history", "rm", entry.entry_id, "--db", self.db_path)
        self.assertEqual(code, EXIT_IDENTICAL)
        code, _, _ = self.run_cli("history", "rm", entry.entry_id, "--db", self.db_path)
        self.assertEqual(code, EXIT_UNAVAILABLE)

        code, _, _ = self.run_cli("history", "clear", "--db", self.db_path)
        self.assertEqual(code, EXIT_IDENTICAL)
        self.assertEqual(HistoryStore(self.db_path).list_entries(), [])


if __name__ == "__main__":
    unittest.main()
