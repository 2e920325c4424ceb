"""Track build artifact sizes across builds and report the size trend."""

from __future__ import annotations

__all__ = [
    "cli",
    "config",
    "history",
    "report",
    "scanner",
    "tracker",
    "trend",
]
