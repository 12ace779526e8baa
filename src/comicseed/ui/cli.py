# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from comicseed.app import run_seed
from comicseed.config import ConfigurationError, configure_logging, get_seed_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from comicseed.config import SeedConfig

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="comicseed",
        description="Seed scraped comic and chapter JSON into the canonical store",
    )
    parser.add_argument(
        "sources",
        nargs="+",
        help="JSON documents or glob patterns (e.g. 'scrapes/*.json')",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Validate and resolve everything but write nothing except the report",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Number of images downloaded concurrently per chunk (defaults to config)",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        help="Download attempts per image before giving up (defaults to config)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        dest="timeout_seconds",
        help="Per-attempt download timeout in seconds (defaults to config)",
    )
    parser.add_argument(
        "--no-skip-existing",
        action="store_false",
        dest="skip_if_exists",
        default=None,
        help="Download images again even when a cached copy exists",
    )
    parser.add_argument(
        "--preserve-children-on-empty",
        action="store_true",
        default=None,
        help="Keep stored genres and images when a record carries none",
    )
    parser.add_argument(
        "--placeholder",
        type=str,
        dest="placeholder_image",
        help="Path stored as cover when a work's cover cannot be acquired",
    )
    parser.add_argument(
        "--image-dir",
        type=Path,
        help="Root directory of the local image cache",
    )
    parser.add_argument(
        "--report",
        type=Path,
        dest="report_path",
        help="Where to write the JSON run report",
    )
    parser.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy database URI (defaults to DATABASE_URI or the data directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(list(argv))


def _build_config(args: argparse.Namespace) -> SeedConfig:
    for name in ("concurrency", "max_retries"):
        value = getattr(args, name)
        if value is not None and value < 1:
            raise ValueError(f"--{name.replace('_', '-')} must be at least 1")
    if args.timeout_seconds is not None and args.timeout_seconds <= 0:
        raise ValueError("--timeout must be positive")

    return get_seed_config().with_overrides(
        dry_run=args.dry_run,
        concurrency=args.concurrency,
        max_retries=args.max_retries,
        timeout_seconds=args.timeout_seconds,
        skip_if_exists=args.skip_if_exists,
        preserve_children_on_empty=args.preserve_children_on_empty,
        placeholder_image=args.placeholder_image,
        image_dir=args.image_dir,
        report_path=args.report_path,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        force=parsed_args.verbose,
    )
    try:
        config = _build_config(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        report = run_seed(
            parsed_args.sources,
            config=config,
            database_uri=parsed_args.database_uri,
        )
    except Exception:
        log.exception("Fatal error during seeding")
        sys.exit(1)

    print("\n".join(report.summary_lines()))
    if report.has_hard_errors:
        log.error("Seed run finished with %s store error(s)", report.stats.errored)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def cli() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
