#!/usr/bin/env python3
"""
Helper script to inspect jsonduel.db in a human-friendly format.

Usage:
    python scripts/inspect_history.py
    python scripts/inspect_history.py --entry-id <entry_id>
"""

import argparse
import json
import sys
from pathlib import Path

from jsonduel.core.types import ABSENT
from jsonduel.storage import DEFAULT_DB_PATH, HistoryEntry, HistoryStore


def format_entry(entry: HistoryEntry) -> str:
    """Format a history entry for display."""
    stats = entry.stats.to_dict() if entry.stats else "N/A"
    lines = [
        f"Entry ID: {entry.entry_id}",
        f"Name: {entry.name}",
        f"Created: {entry.created_at}",
        f"Left:  {entry.left_request.method} {entry.left_request.url} -> {entry.left_status}",
        f"Right: {entry.right_request.method} {entry.right_request.url} -> {entry.right_status}",
        f"Stats: {stats}",
        f"Version: {entry.jsonduel_version} ({entry.schema_version})",
    ]
    return "\n".join(lines)


def format_response(title: str, response) -> str:
    if response is ABSENT:
        return f"{title}: (not captured)"
    return f"{title}:\n{json.dumps(response, indent=2)}"


def main():
    parser = argparse.ArgumentParser(
        description="Inspect jsonduel.db in human-friendly format"
    )
    parser.add_argument(
        "--db-path",
        default=DEFAULT_DB_PATH,
        help=f"Path to history database (default: {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--entry-id",
        help="Show specific entry",
    )
    args = parser.parse_args()

    db_path = Path(args.db_path)
    if not db_path.exists():
        print(f"Error: {db_path} does not exist", file=sys.stderr)
        print("Run examples/history_demo.py first to create it", file=sys.stderr)
        sys.exit(1)

    store = HistoryStore(path=str(db_path))

    if args.entry_id:
        entry = store.get(args.entry_id)
        if entry is None:
            print(f"Error: Entry {args.entry_id} not found", file=sys.stderr)
            sys.exit(1)

        print("=" * 70)
        print(format_entry(entry))
        print("=" * 70)
        print(format_response("Left response", entry.left_response))
        print(format_response("Right response", entry.right_response))
        return

    entries = store.list_entries()
    if not entries:
        print("No comparisons found in database")
        sys.exit(0)

    print(f"Found {len(entries)} comparison(s):\n")
    for i, entry in enumerate(entries, 1):
        print(f"{i}. Entry ID: {entry.entry_id}")
        print(f"   Name: {entry.name}")
        print(f"   Created: {entry.created_at}")
        print()

    print("Use --entry-id <entry_id> to see details")


if __name__ == "__main__":
    main()
