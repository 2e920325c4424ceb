from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence

from .history import BuildRecord

DEFAULT_THRESHOLD = 10.0


class ChangeLevel(enum.Enum):
    REGRESSION = "regression"
    INCREASE = "increase"
    IMPROVEMENT = "improvement"


@dataclass(frozen=True)
class Trend:
    current: BuildRecord
    baseline: tuple[BuildRecord, ...]
    average: float
    percent_change: float


def calculate_average(records: Sequence[BuildRecord]) -> float:
    """Mean ``totalSize`` of ``records``; ``0`` when there are none."""

    if not records:
        return 0
    return sum(record.total_size for record in records) / len(records)


def calculate_percent_change(current: float, average: float) -> float:
    """Percentage difference of ``current`` from ``average``; ``0`` when ``average`` is zero."""

    if average == 0:
        return 0
    return ((current - average) / average) * 100


def compute_trend(history: Sequence[BuildRecord]) -> Trend:
    """Compare the newest record in ``history`` against the ones before it.

    The newest record never contributes to its own baseline.  Without prior
    builds the average is the current total and the change is zero.
    """

    if not history:
        raise ValueError("History must contain the current build.")
    current = history[-1]
    baseline = tuple(history[:-1])
    if not baseline:
        return Trend(current=current, baseline=baseline, average=current.total_size, percent_change=0)
    average = calculate_average(baseline)
    return Trend(
        current=current,
        baseline=baseline,
        average=average,
        percent_change=calculate_percent_change(current.total_size, average),
    )


def classify_change(percent_change: float, threshold: float = DEFAULT_THRESHOLD) -> ChangeLevel:
    if percent_change > threshold:
        return ChangeLevel.REGRESSION
    if percent_change > 0:
        return ChangeLevel.INCREASE
    return ChangeLevel.IMPROVEMENT


__all__ = [
    "ChangeLevel",
    "DEFAULT_THRESHOLD",
    "Trend",
    "calculate_average",
    "calculate_percent_change",
    "classify_change",
    "compute_trend",
]
