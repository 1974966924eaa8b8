"""jsonduel CLI.

Entry point for the ``jsonduel`` command-line tool.

Usage:
    jsonduel diff <left.json> <right.json> [--only-diff] [--search TERM]
                  [--side left|right|both] [--format json|text]
    jsonduel fetch <url_a> <url_b> [-X METHOD] [-H 'Name: value'] [--data BODY]
                   [--timeout S] [--name NAME] [--no-save] [--db PATH]
    jsonduel history list|show|rerun|rm|clear [ENTRY_ID] [--db PATH]

Exit status: 0 when the documents are identical, 1 when they differ, 2 when
a side could not be loaded or a history entry does not exist.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .core.changes import list_changes
from .core.compare import Comparison, compare_sides
from .core.types import ABSENT, CompareOptions, SideResult
from .errors import InputError
from .inputs import DEFAULT_TIMEOUT, RequestConfig, fetch_pair, load_json_file, parse_header
from .render import render_comparison
from .storage.history import DEFAULT_DB_PATH, HistoryEntry, HistoryStore
from .version import JSONDUEL_VERSION

EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_UNAVAILABLE = 2

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _options(args: argparse.Namespace) -> CompareOptions:
    return CompareOptions(only_differences=args.only_diff, search=args.search)


def _emit(comparison: Comparison, args: argparse.Namespace) -> int:
    if args.format == "json":
        stats = comparison.stats
        payload = {
            "stats": stats.to_dict() if stats else None,
            "left_error": comparison.left_error,
            "right_error": comparison.right_error,
            "changes": list_changes(comparison),
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(render_comparison(comparison, _options(args), side=args.side))

    if not comparison.compared:
        return EXIT_UNAVAILABLE
    return EXIT_IDENTICAL if comparison.is_identical() else EXIT_DIFFERENT


def _format_entry(entry: HistoryEntry) -> str:
    stats = entry.stats
    summary = f"{stats.similarity}% similar" if stats else "no stats"
    return (
        f"{entry.entry_id}  {entry.created_at}  {entry.name}  "
        f"({entry.left_request.url} vs {entry.right_request.url}, {summary})"
    )


def _side_from_history(response, status) -> SideResult:
    if response is ABSENT:
        return SideResult.failure("No response captured")
    return SideResult.success(response, status=status)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_diff(args: argparse.Namespace) -> int:
    if args.left == "-" and args.right == "-":
        print("Error: standard input can only be read for one side", file=sys.stderr)
        return EXIT_UNAVAILABLE
    left = load_json_file(args.left, side="left")
    right = load_json_file(args.right, side="right")
    return _emit(compare_sides(left, right), args)


def _request_configs(args: argparse.Namespace) -> tuple:
    try:
        headers = tuple(parse_header(h) for h in args.header)
    except InputError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        sys.exit(EXIT_UNAVAILABLE)
    method = args.method.upper()
    return (
        RequestConfig(url=args.url_a, method=method, headers=headers, body=args.data),
        RequestConfig(url=args.url_b, method=method, headers=headers, body=args.data),
    )


def _fetch_and_emit(
    left_config: RequestConfig,
    right_config: RequestConfig,
    args: argparse.Namespace,
    name: str,
) -> int:
    left, right = fetch_pair(left_config, right_config, timeout=args.timeout)
    comparison = compare_sides(left, right)

    if not args.no_save:
        store = HistoryStore(path=args.db)
        entry = store.add(
            name,
            left_config,
            right_config,
            left_response=left.value,
            right_response=right.value,
            left_status=left.status,
            right_status=right.status,
            stats=comparison.stats,
        )
        if entry is not None:
            print(f"Saved as {entry.entry_id}", file=sys.stderr)

    return _emit(comparison, args)


def _cmd_fetch(args: argparse.Namespace) -> int:
    left_config, right_config = _request_configs(args)
    name = args.name or f"{left_config.url} vs {right_config.url}"
    return _fetch_and_emit(left_config, right_config, args, name)


def _load_entry(args: argparse.Namespace) -> HistoryEntry:
    store = HistoryStore(path=args.db)
    entry = store.get(args.entry_id)
    if entry is None:
        print(f"Error: entry '{args.entry_id}' not found in {args.db}", file=sys.stderr)
        sys.exit(EXIT_UNAVAILABLE)
    return entry


def _cmd_history_list(args: argparse.Namespace) -> int:
    entries = HistoryStore(path=args.db).list_entries()
    if not entries:
        print("No saved comparisons")
    for entry in entries:
        print(_format_entry(entry))
    return EXIT_IDENTICAL


def _cmd_history_show(args: argparse.Namespace) -> int:
    entry = _load_entry(args)
    left = _side_from_history(entry.left_response, entry.left_status)
    right = _side_from_history(entry.right_response, entry.right_status)
    comparison = compare_sides(left, right)

    # Statistics are always recomputed, never taken from storage
    if comparison.stats is not None and comparison.stats != entry.stats:
        HistoryStore(path=args.db).update_stats(entry.entry_id, comparison.stats)
    return _emit(comparison, args)


def _cmd_history_rerun(args: argparse.Namespace) -> int:
    entry = _load_entry(args)
    return _fetch_and_emit(entry.left_request, entry.right_request, args, entry.name)


def _cmd_history_rm(args: argparse.Namespace) -> int:
    if not HistoryStore(path=args.db).remove(args.entry_id):
        print(f"Error: entry '{args.entry_id}' not found in {args.db}", file=sys.stderr)
        return EXIT_UNAVAILABLE
    return EXIT_IDENTICAL


def _cmd_history_clear(args: argparse.Namespace) -> int:
    HistoryStore(path=args.db).clear()
    return EXIT_IDENTICAL


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _add_view_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--only-diff",
        action="store_true",
        default=False,
        help="Show only differences (and search matches)",
    )
    parser.add_argument("--search", default=None, help="Case-insensitive text search")
    parser.add_argument(
        "--side",
        choices=["left", "right", "both"],
        default="both",
        help="Which documents to show (default: both)",
    )
    parser.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)",
    )


def _add_db_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        default=DEFAULT_DB_PATH,
        help=f"Path to SQLite history database (default: {DEFAULT_DB_PATH})",
    )


def _add_fetch_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        default=False,
        help="Do not save the comparison to history",
    )
    _add_db_argument(parser)
    _add_view_arguments(parser)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonduel",
        description="jsonduel: compare two JSON documents or API responses",
    )
    parser.add_argument("--version", action="version", version=JSONDUEL_VERSION)
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False, help="Debug logging"
    )
    subparsers = parser.add_subparsers(dest="command")

    diff_parser = subparsers.add_parser("diff", help="Compare two JSON files")
    diff_parser.add_argument("left", help="Left document path ('-' for stdin)")
    diff_parser.add_argument("right", help="Right document path ('-' for stdin)")
    _add_view_arguments(diff_parser)
    diff_parser.set_defaults(func=_cmd_diff)

    fetch_parser = subparsers.add_parser("fetch", help="Fetch and compare two URLs")
    fetch_parser.add_argument("url_a", help="Left URL")
    fetch_parser.add_argument("url_b", help="Right URL")
    fetch_parser.add_argument(
        "-X", "--method", default="GET", help="HTTP method (default: GET)"
    )
    fetch_parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        help="Request header 'Name: value' (repeatable)",
    )
    fetch_parser.add_argument("--data", default="", help="Request body")
    fetch_parser.add_argument("--name", default=None, help="Label for the history entry")
    _add_fetch_arguments(fetch_parser)
    fetch_parser.set_defaults(func=_cmd_fetch)

    history_parser = subparsers.add_parser("history", help="Saved comparisons")
    history_sub = history_parser.add_subparsers(dest="history_command")

    list_parser = history_sub.add_parser("list", help="List saved comparisons")
    _add_db_argument(list_parser)
    list_parser.set_defaults(func=_cmd_history_list)

    show_parser = history_sub.add_parser("show", help="Compare saved responses again")
    show_parser.add_argument("entry_id")
    _add_db_argument(show_parser)
    _add_view_arguments(show_parser)
    show_parser.set_defaults(func=_cmd_history_show)

    rerun_parser = history_sub.add_parser("rerun", help="Fetch a saved request pair again")
    rerun_parser.add_argument("entry_id")
    _add_fetch_arguments(rerun_parser)
    rerun_parser.set_defaults(func=_cmd_history_rerun)

    rm_parser = history_sub.add_parser("rm", help="Remove a saved comparison")
    rm_parser.add_argument("entry_id")
    _add_db_argument(rm_parser)
    rm_parser.set_defaults(func=_cmd_history_rm)

    clear_parser = history_sub.add_parser("clear", help="Remove all saved comparisons")
    _add_db_argument(clear_parser)
    clear_parser.set_defaults(func=_cmd_history_clear)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if hasattr(args, "func"):
        sys.exit(args.func(args))
    else:
        parser.print_help()
        sys.exit(EXIT_UNAVAILABLE)


if __name__ == "__main__":
    main()
