"""
Example of saving comparisons to the local history.

Run this with:
    python examples/history_demo.py

Then inspect the history with:
    jsonduel history list
    python scripts/inspect_history.py
"""

from jsonduel import HistoryStore, RequestConfig, SideResult, compare_sides


def main() -> None:
    store = HistoryStore()

    left_request = RequestConfig(
        url="api.example.com/v1/users/42",
        headers=(("Accept", "application/json"),),
    )
    right_request = RequestConfig(
        url="api.example.com/v2/users/42",
        headers=(("Accept", "application/json"),),
    )

    # Stand-ins for fetch_pair(left_request, right_request)
    left = SideResult.success({"id": 42, "name": "Alice", "tags": ["a", "b"]}, status=200)
    right = SideResult.success({"id": 42, "name": "Alice", "tags": ["a"]}, status=200)

    comparison = compare_sides(left, right)
    entry = store.add(
        "users v1 vs v2",
        left_request,
        right_request,
        left_response=left.value,
        right_response=right.value,
        left_status=left.status,
        right_status=right.status,
        stats=comparison.stats,
    )
    if entry is None:
        print("History is unavailable, nothing saved")
        return

    print(f"Saved comparison: {entry.entry_id}")
    print(f"Similarity: {entry.stats.similarity}%")
    print(f"Entries in history: {len(store.list_entries())}")


if __name__ == "__main__":
    main()
