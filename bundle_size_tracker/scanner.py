"""Measure the build artifacts found beneath an output directory.

The scanner walks the output tree with an explicit stack so arbitrarily deep
trees never exhaust the interpreter's recursion limit.  Only regular files
whose names end in one of the tracked extensions are measured; directory
symlinks are not followed, so a tree containing symlink cycles is walked
once.  Sockets, FIFOs and device nodes are ignored.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Mapping

LOGGER = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = ("js", "css", "html")


class ScanError(OSError):
    """Raised when the output directory cannot be read."""


def _suffixes(extensions: Iterable[str]) -> tuple[str, ...]:
    return tuple(f".{ext.lstrip('.')}" for ext in extensions)


def scan_artifacts(root: Path | str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> dict[str, int]:
    """Return ``{relative path: size in bytes}`` for every tracked artifact under ``root``.

    Paths are relative to ``root`` and use forward slashes.  The suffix match is
    case-sensitive.  An unreadable or missing directory raises :class:`ScanError`
    rather than producing an empty mapping, so callers can tell "no artifacts"
    apart from "could not measure".
    """

    root_path = Path(root)
    suffixes = _suffixes(extensions)
    sizes: dict[str, int] = {}
    pending: list[Path] = [root_path]

    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        pending.append(Path(entry.path))
                    elif entry.is_file(follow_symlinks=False) and entry.name.endswith(suffixes):
                        relative = Path(entry.path).relative_to(root_path).as_posix()
                        sizes[relative] = entry.stat(follow_symlinks=False).st_size
        except OSError as exc:
            raise ScanError(f"Unable to scan build output at {directory}: {exc}") from exc

    LOGGER.debug("Scanned %d artifacts under %s", len(sizes), root_path)
    return sizes


def total_size(sizes: Mapping[str, int]) -> int:
    """Sum the artifact sizes of a single build."""

    return sum(sizes.values())


__all__ = [
    "DEFAULT_EXTENSIONS",
    "ScanError",
    "scan_artifacts",
    "total_size",
]
