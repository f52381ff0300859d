#!/usr/bin/env python3
"""Resolve a monitor snapshot into a shareable physical layout URL.

Usage::

    monitor-layout --snapshot desk.yaml
    monitor-layout --snapshot desk.json --show-layout
    monitor-layout --snapshot desk.yaml --derive-density --plan
    monitor-layout --snapshot desk.yaml --export-calibration out/calibration.json
    monitor-layout --snapshot desk.yaml --config custom_engine.yaml --json-logs

The URL is printed on stdout; everything else goes to the log (stderr).

Exit codes: 0 layout produced, 1 bad config or snapshot, 2 no layout.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

import yaml

from monitor_layout.calibration.planning import (
    compute_calibration_order,
    format_calibration_plan,
)
from monitor_layout.configs.loader import ConfigError, load_config
from monitor_layout.export.calibration_doc import write_calibration_document
from monitor_layout.pipeline import LayoutResult, prepare_graph, run_pipeline
from monitor_layout.utils.logging_config import setup_logging
from monitor_layout.utils.validators import SnapshotError, load_snapshot

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_NO_LAYOUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve monitor calibration measurements into a physical layout",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--snapshot", "-s", type=Path, required=True,
                        help="Snapshot file (YAML or JSON, layout_snapshot.v1)")
    parser.add_argument("--config", "-c", type=Path,
                        help="Engine config file (default: bundled engine.yaml)")
    parser.add_argument("--derive-density", action="store_true",
                        help="Derive missing ppi from EDID size or monitor names")
    parser.add_argument("--show-layout", action="store_true",
                        help="Log resolved densities and physical rectangles")
    parser.add_argument("--plan", action="store_true",
                        help="Log the suggested calibration order")
    parser.add_argument("--export-calibration", type=Path, metavar="PATH",
                        help="Write the calibration document (JSON) to PATH")
    parser.add_argument("--log-level", type=str.upper, default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Override the configured log level")
    parser.add_argument("--json-logs", action="store_true",
                        help="Emit JSON log lines")
    return parser


def log_layout(result: LayoutResult) -> None:
    for mid, ppi in result.densities.items():
        logger.info("monitor %d: %.2f ppi", mid, ppi)
    for mid, rect in result.normalized.items():
        logger.info(
            "monitor %d: x=%.4f y=%.4f  %.2f x %.2f in",
            mid, rect.x, rect.y, rect.width, rect.height,
        )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError, yaml.YAMLError) as exc:
        setup_logging("ERROR")
        logger.error("Configuration error: %s", exc)
        return EXIT_INPUT_ERROR

    if args.derive_density:
        config = dataclasses.replace(config, derive_missing_density=True)

    setup_logging(
        args.log_level or config.logging.level,
        config.logging.log_file,
        json=args.json_logs or config.logging.json,
        context={"app": "monitor-layout", "snapshot": args.snapshot.name},
    )

    try:
        graph = load_snapshot(args.snapshot)
    except (SnapshotError, FileNotFoundError, yaml.YAMLError) as exc:
        logger.error("Snapshot error: %s", exc)
        return EXIT_INPUT_ERROR

    if args.plan:
        pairs = compute_calibration_order(graph.monitors)
        if pairs:
            logger.info("Calibration plan:\n%s", format_calibration_plan(graph.monitors, pairs))
        else:
            logger.info("Fewer than two monitors; nothing to calibrate")

    if args.export_calibration:
        path = write_calibration_document(prepare_graph(graph, config), args.export_calibration)
        logger.info("Calibration document written to %s", path)

    result = run_pipeline(graph, config)
    if args.show_layout:
        log_layout(result)

    if result.url is None:
        logger.warning("No layout could be resolved from %s", args.snapshot)
        return EXIT_NO_LAYOUT

    print(result.url)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
