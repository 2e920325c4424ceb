from __future__ import annotations

import contextlib
import enum
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from .scanner import total_size as sum_sizes

LOGGER = logging.getLogger(__name__)

DEFAULT_HISTORY_FILE = ".bundle-size-history.json"
DEFAULT_MAX_HISTORY = 10

ByteCount = Annotated[int, Field(ge=0, strict=True)]


class HistoryWriteError(OSError):
    """Raised when the history file cannot be written."""


class BuildRecord(BaseModel):
    """Artifact sizes measured for a single build."""

    timestamp: int = Field(strict=True)
    total_size: ByteCount = Field(alias="totalSize")
    files: dict[str, ByteCount]

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @model_validator(mode="after")
    def _check_total(self) -> "BuildRecord":
        if self.total_size != sum_sizes(self.files):
            raise ValueError("totalSize must equal the sum of the file sizes")
        return self

    @classmethod
    def from_sizes(cls, sizes: Mapping[str, int], *, timestamp: int | None = None) -> "BuildRecord":
        """Create a record whose total is derived from ``sizes``."""

        if timestamp is None:
            timestamp = time.time_ns() // 1_000_000
        files = dict(sizes)
        return cls(timestamp=timestamp, total_size=sum_sizes(files), files=files)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


_HISTORY_ADAPTER = TypeAdapter(list[BuildRecord])


class LoadStatus(enum.Enum):
    OK = "ok"
    MISSING = "missing"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class HistoryLoadResult:
    """Outcome of reading the history file, kept for diagnostics."""

    status: LoadStatus
    records: list[BuildRecord] = field(default_factory=list)
    detail: str | None = None


def read_history(path: Path) -> HistoryLoadResult:
    """Read ``path`` and report whether it was missing, corrupt, or valid.

    Only a missing file or unparseable contents are folded into a status;
    any other ``OSError`` (permission denied, path is a directory) propagates.
    """

    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return HistoryLoadResult(LoadStatus.MISSING)

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        return HistoryLoadResult(LoadStatus.CORRUPT, detail=str(exc))

    # ValueError covers JSONDecodeError and oversized integer literals.
    try:
        payload = json.loads(text)
    except (ValueError, RecursionError) as exc:
        return HistoryLoadResult(LoadStatus.CORRUPT, detail=f"{type(exc).__name__}: {exc}")

    if not isinstance(payload, list):
        return HistoryLoadResult(
            LoadStatus.CORRUPT,
            detail=f"expected list, got {type(payload).__name__}",
        )

    try:
        records = _HISTORY_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        return HistoryLoadResult(LoadStatus.CORRUPT, detail=f"{exc.error_count()} invalid field(s)")
    return HistoryLoadResult(LoadStatus.OK, records)


def load_history(path: Path) -> list[BuildRecord]:
    """Return the stored build records, oldest first.

    A missing history file is the normal state for a project's first build and
    a corrupt one must never break a build, so both yield an empty list.  The
    distinction is only logged at debug level.
    """

    result = read_history(path)
    if result.status is LoadStatus.MISSING:
        LOGGER.debug("No build history at %s; starting fresh", path)
    elif result.status is LoadStatus.CORRUPT:
        LOGGER.debug("Ignoring unreadable build history at %s: %s", path, result.detail)
    return list(result.records)


def save_history(path: Path, records: Iterable[BuildRecord]) -> None:
    """Replace the history file at ``path`` with ``records``.

    The payload is written to a sibling temporary file and moved into place so
    an interrupted write never leaves a truncated history behind.
    """

    payload = [record.to_payload() for record in records]
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        tmp.replace(path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise HistoryWriteError(f"Failed to write build history to {path}: {exc}") from exc


def trim_history(records: Iterable[BuildRecord], limit: int) -> list[BuildRecord]:
    items = list(records)
    if len(items) <= limit:
        return items
    return items[-limit:]


def append_record(
    records: Iterable[BuildRecord],
    record: BuildRecord,
    *,
    limit: int = DEFAULT_MAX_HISTORY,
) -> list[BuildRecord]:
    """Append ``record`` and evict the oldest entries beyond ``limit``."""

    if limit < 1:
        raise ValueError("limit must be >= 1")
    history = list(records)
    history.append(record)
    return trim_history(history, limit)


__all__ = [
    "BuildRecord",
    "DEFAULT_HISTORY_FILE",
    "DEFAULT_MAX_HISTORY",
    "HistoryLoadResult",
    "HistoryWriteError",
    "LoadStatus",
    "append_record",
    "load_history",
    "read_history",
    "save_history",
    "trim_history",
]
