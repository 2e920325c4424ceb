#!/usr/bin/env python3
"""Command-line entry point run after a build has written its output."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_CONFIG_FILE, ConfigError, load_config
from .tracker import BundleSizeTracker
from .trend import ChangeLevel

LOGGER = logging.getLogger("bundle_size")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bundle-size-tracker",
        description="Record build artifact sizes and compare them with previous builds.",
    )
    parser.add_argument("output_dir", type=Path, help="Build output directory to measure.")
    parser.add_argument("--project-root", type=Path, default=Path.cwd(), help="Project root (defaults to CWD).")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"YAML configuration file (defaults to {DEFAULT_CONFIG_FILE} in the project root).",
    )
    parser.add_argument("--history-file", type=Path, default=None, help="Where build history is stored.")
    parser.add_argument("--max-history", type=int, default=None, help="Number of builds to keep in history.")
    parser.add_argument("--threshold", type=float, default=None, help="Percent increase that triggers a warning.")
    parser.add_argument(
        "--json",
        dest="output_json",
        action="store_true",
        default=None,
        help="Write bundle-size-report.json into the output directory.",
    )
    parser.add_argument(
        "--fail-on-regression",
        action="store_true",
        help="Exit with status 1 when the size increase exceeds the threshold.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    project_root = args.project_root.resolve()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="[bundle_size] %(levelname)s %(message)s")

    config_path = args.config or (project_root / DEFAULT_CONFIG_FILE)
    try:
        config = load_config(config_path, required=args.config is not None).with_overrides(
            history_file=args.history_file,
            max_history=args.max_history,
            threshold=args.threshold,
            output_json=args.output_json,
        )
    except ConfigError as exc:
        LOGGER.error("%s", exc)
        return 2

    tracker = BundleSizeTracker(config, project_root=project_root)
    output_dir = args.output_dir if args.output_dir.is_absolute() else project_root / args.output_dir
    result = tracker.run_safely(output_dir)
    if result is None:
        return 0

    print(tracker.summarise(result), end="")
    if result.report_path is not None:
        LOGGER.info("Wrote bundle size report to %s", result.report_path)

    if args.fail_on_regression and result.level is ChangeLevel.REGRESSION:
        LOGGER.error(
            "Bundle size grew %.2f%%, above the %g%% threshold.",
            result.trend.percent_change,
            config.threshold,
        )
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
