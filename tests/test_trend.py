from __future__ import annotations

import pytest

from bundle_size_tracker.history import BuildRecord
from bundle_size_tracker.trend import (
    ChangeLevel,
    calculate_average,
    calculate_percent_change,
    classify_change,
    compute_trend,
)


def _record(total: int, timestamp: int = 0) -> BuildRecord:
    return BuildRecord.from_sizes({"app.js": total}, timestamp=timestamp)


def test_average_of_empty_sequence_is_zero() -> None:
    assert calculate_average([]) == 0


def test_average_of_totals() -> None:
    assert calculate_average([_record(100), _record(200)]) == 150


@pytest.mark.parametrize(
    ("current", "average", "expected"),
    [
        (110, 100, 10),
        (90, 100, -10),
        (100, 100, 0),
        (5, 0, 0),
        (0, 0, 0),
    ],
)
def test_percent_change(current: float, average: float, expected: float) -> None:
    assert calculate_percent_change(current, average) == pytest.approx(expected)


def test_first_build_compares_against_itself() -> None:
    current = _record(1000, 1)

    trend = compute_trend([current])

    assert trend.baseline == ()
    assert trend.average == 1000
    assert trend.percent_change == 0


def test_baseline_excludes_current_build() -> None:
    previous = [_record(100, 1), _record(200, 2)]
    current = _record(165, 3)

    trend = compute_trend([*previous, current])

    assert trend.current == current
    assert trend.baseline == tuple(previous)
    assert trend.average == 150
    assert trend.percent_change == pytest.approx(10)


def test_zero_sized_baseline_reports_no_change() -> None:
    trend = compute_trend([_record(0, 1), _record(50, 2)])

    assert trend.average == 0
    assert trend.percent_change == 0


def test_compute_trend_requires_current_build() -> None:
    with pytest.raises(ValueError):
        compute_trend([])


@pytest.mark.parametrize(
    ("change", "expected"),
    [
        (15, ChangeLevel.REGRESSION),
        (10.01, ChangeLevel.REGRESSION),
        (10, ChangeLevel.INCREASE),
        (5, ChangeLevel.INCREASE),
        (0, ChangeLevel.IMPROVEMENT),
        (-3, ChangeLevel.IMPROVEMENT),
    ],
)
def test_classify_change(change: float, expected: ChangeLevel) -> None:
    assert classify_change(change, 10) is expected


def test_classify_change_with_zero_threshold() -> None:
    assert classify_change(0.5, 0) is ChangeLevel.REGRESSION
    assert classify_change(0, 0) is ChangeLevel.IMPROVEMENT
