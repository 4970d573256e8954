"""CLI entry point for the test case runner."""

import argparse
import asyncio
import json
import logging
import signal
import sys
from contextlib import suppress
from enum import IntEnum
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from qc_runner.errors import DiscoveryError, NoBinaryFoundError
from qc_runner.formats.loading import (
    ListingFormatNotFoundError,
    available_formats,
    load_listing_format,
)
from qc_runner.models.config import DEFAULT_BUILD_DIR, RunnerConfig
from qc_runner.models.result import RunReport
from qc_runner.runner import QcRunner

STATUS_SYMBOLS = {
    "failure": "✗",
    "cancelled": "!",
}


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    CASE_FAILURES = 1
    SETUP_ERROR = 3


def log_results_summary(log: logging.Logger, report: RunReport) -> None:
    """Log the elapsed time and where the logs of failing cases are."""
    summary = report.summary
    log.info("=" * 80)
    log.info(
        "%d case(s), %d passed, %d failed, %d cancelled in %.2fs",
        summary.total,
        summary.passed,
        len(summary.failures),
        len(summary.cancelled),
        report.elapsed,
    )

    for result in [*summary.failures, *summary.cancelled]:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info(
            "%s %s: %s (%.2fs)",
            symbol,
            result.case_id,
            result.status,
            result.duration,
        )
        if result.error is not None:
            log.info("  Reason: %s", result.error)
        if result.status == "failure" and result.log_path is not None:
            log.info("  Log: %s", result.log_path)


def format_output(report: RunReport) -> dict[str, Any]:
    """Format the run report for JSON output."""
    summary = report.summary
    return {
        "binary": str(report.binary),
        "results_dir": str(report.results_dir),
        "elapsed": round(report.elapsed, 3),
        "total": summary.total,
        "passed": summary.passed,
        "failed": len(summary.failures),
        "cancelled": len(summary.cancelled),
        "failures": [
            {
                "case": result.case_id,
                "duration": result.duration,
                "returncode": result.returncode,
                "message": str(result.error) if result.error is not None else None,
                "log": str(result.log_path) if result.log_path is not None else None,
            }
            for result in summary.failures
        ],
    }


async def run(config: RunnerConfig) -> int:
    """Run every case of the test binary and return exit code."""
    log = logging.getLogger("qc_runner")

    try:
        listing_format = load_listing_format(config.listing_format)
    except ListingFormatNotFoundError as e:
        log.error("%s", e)
        return ExitCode.SETUP_ERROR

    runner = QcRunner(config=config, listing_format=listing_format)

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(signum, runner.cancel)

    try:
        report = await runner.run()
    except (NoBinaryFoundError, DiscoveryError) as e:
        log.error("Run aborted: %s", e)
        return ExitCode.SETUP_ERROR
    finally:
        for signum in (signal.SIGINT, signal.SIGTERM):
            with suppress(NotImplementedError):
                loop.remove_signal_handler(signum)

    log_results_summary(log, report)
    print(json.dumps(format_output(report), indent=2))

    return ExitCode.SUCCESS if report.summary.ok else ExitCode.CASE_FAILURES


def build_config(args: argparse.Namespace) -> RunnerConfig:
    """Build the runner configuration from parsed arguments."""
    options: dict[str, Any] = {
        "build_dir": args.build_dir,
        "binary": args.binary,
        "results_dir": args.results_dir,
        "timeout": args.timeout,
        "listing_format": args.format,
        "filters": tuple(args.filter),
    }
    if args.jobs is not None:
        options["jobs"] = args.jobs
    return RunnerConfig(**options)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Run each case of a test binary in its own process, "
        "keeping logs of failing cases only"
    )
    parser.add_argument(
        "--build-dir",
        type=Path,
        default=DEFAULT_BUILD_DIR,
        help="Directory scanned for the most recently built test binary "
        f"(default: {DEFAULT_BUILD_DIR})",
    )
    parser.add_argument(
        "--binary",
        type=Path,
        default=None,
        help="Test binary to run instead of the most recent one in --build-dir",
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=None,
        help="Where logs of failing cases are kept (default: <build-dir>/qc-results)",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Maximum number of cases running at once (default: CPU count)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds after which a case is killed and counted as failed",
    )
    parser.add_argument(
        "--format",
        default="libtest",
        help="Listing format of the test binary "
        f"(one of: {', '.join(available_formats())}; default: libtest)",
    )
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        help="Only run cases whose id contains this substring (repeatable)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every case as it completes",
    )
    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_config(args)
    except ValidationError as e:
        parser.error(str(e))

    exit_code = asyncio.run(run(config))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
