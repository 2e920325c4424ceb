"""Render tracking results as a terminal summary and a JSON report."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

from jinja2 import StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

from .trend import ChangeLevel, Trend, classify_change

LOGGER = logging.getLogger(__name__)

ByteFormatter = Callable[[int | float], str]

_UNITS = ("B", "KB", "MB", "GB")
_RULE = "━" * 60

# Artifact names come from the build output, so the template never gets to
# evaluate anything beyond plain attribute access.
_TEMPLATE_ENV = SandboxedEnvironment(
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)
_SUMMARY_TEMPLATE = _TEMPLATE_ENV.from_string(
    """
{{ rule }}
📦 Bundle Size Analysis
{{ rule }}
Current build: {{ current_size }}
{% if baseline_count %}
Average (last {{ baseline_count }} builds): {{ average_size }}
Change: {{ arrow }} {{ change }}%
{% if regression %}

⚠️  Warning: Bundle size increased by more than {{ threshold }}%!
{% endif %}
{% else %}
No previous builds to compare
{% endif %}

File breakdown:
{% for name, size in files %}
  {{ name }}: {{ size }}
{% endfor %}
{{ rule }}
""".strip()
)


def _trim_number(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_bytes(size: int | float) -> str:
    """Format ``size`` with 1024-based units, e.g. ``1.5 KB``."""

    if size <= 0:
        return "0 B"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{_trim_number(value)} {_UNITS[index]}"


def render_summary(
    trend: Trend,
    *,
    threshold: float,
    format_bytes: ByteFormatter = format_bytes,
) -> str:
    """Return the human-readable summary printed after a build."""

    files = sorted(trend.current.files.items(), key=lambda item: (-item[1], item[0]))
    rendered = _SUMMARY_TEMPLATE.render(
        rule=_RULE,
        current_size=format_bytes(trend.current.total_size),
        baseline_count=len(trend.baseline),
        average_size=format_bytes(trend.average),
        arrow="↑" if trend.percent_change > 0 else "↓",
        change=f"{abs(trend.percent_change):.2f}",
        regression=classify_change(trend.percent_change, threshold) is ChangeLevel.REGRESSION,
        threshold=f"{threshold:g}",
        files=[(name, format_bytes(size)) for name, size in files],
    ).rstrip()
    return f"{rendered}\n"


def build_report(trend: Trend) -> dict[str, Any]:
    """Return the JSON report payload; ``history`` excludes the current build."""

    return {
        "current": {
            "totalSize": trend.current.total_size,
            "files": dict(trend.current.files),
        },
        "average": trend.average,
        "percentChange": trend.percent_change,
        "history": [record.to_payload() for record in trend.baseline],
    }


def write_report(path: Path, report: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    LOGGER.debug("Wrote bundle size report to %s", path)


__all__ = [
    "ByteFormatter",
    "build_report",
    "format_bytes",
    "render_summary",
    "write_report",
]
