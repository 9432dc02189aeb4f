"""
Sapphire Notes - plain-text note persistence.

Notes are stored as individual ``.txt`` files in a user-configurable directory,
while per-note display metadata (font family, font size, cursor position) lives
in a separate sidecar store that is reconciled against the directory on load.

This version uses synchronous operations.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sapphire-notes")
except PackageNotFoundError:
    __version__ = "1.0.0"
