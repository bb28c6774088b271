"""
CLI entrypoint to build a match statistics report from captured event files.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from .cache import ReportCache
from .config import ReportSettings
from .reporting import build_report, load_report_config


LOGGER = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build handball match statistics from captured event files.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to the report configuration (defaults to HANDBALLSTATS_REPORT_CONFIG or config/report.yml).",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Write the report JSON to this path (defaults to HANDBALLSTATS_OUTPUT, else stdout).",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Always recompute the report instead of reusing a cached copy.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    level = getattr(logging, str(args.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = ReportSettings.from_env()
    config_path = Path(args.config or settings.report_config)
    output_path = args.output or settings.output_path

    cache = None
    if not args.no_cache:
        cache = ReportCache(settings.cache_dir, default_ttl=settings.cache_ttl)

    try:
        LOGGER.info("Loading report config from %s", config_path)
        config = load_report_config(config_path)
        report = build_report(config, cache=cache)
        payload = json.dumps(report, indent=2)
        if output_path:
            path = Path(output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(payload + "\n", encoding="utf-8")
            LOGGER.info("Report written to %s", path)
        else:
            sys.stdout.write(payload + "\n")
    except Exception as exc:
        LOGGER.error("Report build failed: %s", exc, exc_info=level <= logging.DEBUG)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
