"""Exceptions raised by jsonduel.

The diff engine itself never raises for well-formed JSON: absent paths and
shape mismatches are classifications, not failures. These exceptions cover
the edges around it.
"""

from __future__ import annotations

from typing import Optional


class JsonDuelError(Exception):
    """Base exception for jsonduel errors."""

    pass


class InputError(JsonDuelError):
    """
    Raised when a document cannot be turned into a JSON value.

    Carries the side ("left" or "right") when the failing document belongs
    to one half of a comparison.
    """

    def __init__(self, message: str, side: Optional[str] = None):
        super().__init__(message)
        self.side = side

    def __str__(self) -> str:
        if self.side:
            return f"InputError(side={self.side}): {self.args[0]}"
        return f"InputError: {self.args[0]}"


class HistoryError(JsonDuelError):
    """Raised for invalid use of the history store (not for storage failures)."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        location = f" [{self.path}]" if self.path else ""
        return f"HistoryError{location}: {self.args[0]}"
