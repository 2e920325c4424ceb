"""Run one build's worth of size tracking: scan, record, compare, persist."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import TrackerConfig
from .history import BuildRecord, HistoryWriteError, append_record, load_history, save_history
from .report import ByteFormatter, build_report, format_bytes, render_summary, write_report
from .scanner import scan_artifacts
from .trend import ChangeLevel, Trend, classify_change, compute_trend

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], int]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class TrackingResult:
    """Everything a single tracking run produced."""

    trend: Trend
    level: ChangeLevel
    history: tuple[BuildRecord, ...]
    history_path: Path
    persisted: bool
    report_path: Optional[Path] = None


class BundleSizeTracker:
    """Measure a build output directory and compare it with previous builds."""

    def __init__(
        self,
        config: TrackerConfig,
        *,
        project_root: Path,
        format_bytes: ByteFormatter = format_bytes,
        clock: Clock = _now_ms,
    ) -> None:
        self.config = config
        self.project_root = project_root
        self.format_bytes = format_bytes
        self.clock = clock

    @property
    def history_path(self) -> Path:
        return self.config.resolve_history_file(self.project_root)

    # Public API -----------------------------------------------------
    def run(self, output_dir: Path) -> TrackingResult:
        """Track ``output_dir`` and return the trend for this build.

        Scan failures propagate.  A failure to persist the history is logged
        and reflected in :attr:`TrackingResult.persisted`; the computed trend
        is still returned so it can be reported.
        """

        sizes = scan_artifacts(output_dir, self.config.extensions)
        record = BuildRecord.from_sizes(sizes, timestamp=self.clock())

        history_path = self.history_path
        history = append_record(load_history(history_path), record, limit=self.config.max_history)
        trend = compute_trend(history)
        level = classify_change(trend.percent_change, self.config.threshold)

        persisted = self._persist(history_path, history)
        report_path = self._write_report(output_dir, trend) if self.config.output_json else None

        return TrackingResult(
            trend=trend,
            level=level,
            history=tuple(history),
            history_path=history_path,
            persisted=persisted,
            report_path=report_path,
        )

    def run_safely(self, output_dir: Path) -> Optional[TrackingResult]:
        """Run :meth:`run`, downgrading any failure to a logged warning.

        Size tracking is advisory and must never fail the build it observes.
        """

        try:
            return self.run(output_dir)
        except Exception as exc:
            LOGGER.warning("Bundle size tracking skipped: %s", exc)
            LOGGER.debug("Tracking failure details", exc_info=True)
            return None

    def summarise(self, result: TrackingResult) -> str:
        return render_summary(result.trend, threshold=self.config.threshold, format_bytes=self.format_bytes)

    # Internal helpers ----------------------------------------------
    def _persist(self, history_path: Path, history: list[BuildRecord]) -> bool:
        try:
            save_history(history_path, history)
        except HistoryWriteError as exc:
            LOGGER.warning("%s; this build was not recorded", exc)
            return False
        LOGGER.info("Updated build size history at %s (%d entries)", history_path, len(history))
        return True

    def _write_report(self, output_dir: Path, trend: Trend) -> Optional[Path]:
        report_path = output_dir / self.config.report_file
        try:
            write_report(report_path, build_report(trend))
        except OSError as exc:
            LOGGER.warning("Failed to write bundle size report to %s: %s", report_path, exc)
            return None
        return report_path


__all__ = [
    "BundleSizeTracker",
    "TrackingResult",
]
