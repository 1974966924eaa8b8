#!/usr/bin/env python3
"""
jsonduel Example: comparing two documents

Demonstrates:
1. Classifying two versions of an API payload against each other
2. Reading the identical/differences/similarity statistics
3. Narrowing the view to differences only, then to a search term
4. Listing the changes as flat JSON paths

No network access. No files written.
"""

import os
import sys

# Add parent directory to path for local development
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jsonduel import CompareOptions, compare, list_changes, render_comparison


V1 = {
    "id": 42,
    "name": "Alice",
    "email": "alice@example.com",
    "roles": ["admin", "dev"],
    "address": {"city": "Paris", "zip": "75001"},
}

V2 = {
    "id": 42,
    "name": "Alice",
    "roles": ["admin"],
    "address": {"city": "Lyon", "zip": "75001"},
    "active": True,
}


def main():
    print("=" * 60)
    print("jsonduel Example: comparing two documents")
    print("=" * 60)

    result = compare(V1, V2)
    stats = result.stats

    print(f"\nIdentical:   {stats.identical}")
    print(f"Differences: {stats.differences}")
    print(f"Similarity:  {stats.similarity}%")

    print("\n1. Full view")
    print(render_comparison(result))

    print("\n2. Only differences")
    print(render_comparison(result, CompareOptions.differences_only()))

    print("\n3. Search for 'paris'")
    print(render_comparison(result, CompareOptions(search="paris"), side="left"))

    print("\n4. Changes")
    for op in list_changes(result):
        detail = {k: v for k, v in op.items() if k not in ("op", "path")}
        print(f"  {op['op']:<9} {op['path']}  {detail}")


if __name__ == "__main__":
    main()
