"""
jsonduel version constants.

This module defines version constants for the jsonduel library and its
history store. They are written alongside every saved comparison so that
older history databases can still be loaded.
"""

# Library version (matches pyproject.toml)
JSONDUEL_VERSION = "0.2.0"

# Schema version for saved history entries
# Increment when the history format changes in a breaking way
HISTORY_SCHEMA_VERSION = "history_v1"

# Default values for backward compatibility when loading older history rows
DEFAULT_JSONDUEL_VERSION = "0.1.0"
DEFAULT_HISTORY_SCHEMA_VERSION = "history_v0"
