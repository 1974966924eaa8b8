"""Canonical serialization and strict equality for JSON values.

Guarantees:
- canonical_json(v) is deterministic: object member order is irrelevant
  (keys sorted), separators are compact, non-ASCII text is kept as is
- json_equal(a, b) is structural: objects compare order-independently,
  arrays positionally
- Booleans never equal numbers; int and float are one JSON number type
"""
from __future__ import annotations

import json
from typing import Any


def canonical_json(value: Any) -> str:
    """Serialize a JSON value to its canonical text."""
    return json.dumps(
        value,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )


def display_text(value: Any) -> str:
    """Text of a primitive as a user reads it: strings unquoted, JSON otherwise."""
    if isinstance(value, str):
        return value
    return canonical_json(value)


def json_equal(a: Any, b: Any) -> bool:
    """Strict structural equality of two JSON values."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b

    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b

    if isinstance(a, dict):
        if not isinstance(b, dict) or len(a) != len(b):
            return False
        for k, v in a.items():
            if k not in b or not json_equal(v, b[k]):
                return False
        return True

    if isinstance(a, (list, tuple)):
        if not isinstance(b, (list, tuple)) or len(a) != len(b):
            return False
        return all(json_equal(x, y) for x, y in zip(a, b))

    if a is None or b is None:
        return a is None and b is None

    return type(a) is type(b) and a == b
