"""Command-line entry point for catalog_governance."""

from __future__ import annotations

import sys
import time

from dotenv import load_dotenv

from catalog_governance.analytics.periods import period_caption, resolve_period
from catalog_governance.cli.parser import parse_arguments
from catalog_governance.core.colors import ConsoleColors
from catalog_governance.core.config import GovernanceConfig, load_config_file
from catalog_governance.core.constants import BANNER_WIDTH, PERIODS
from catalog_governance.core.exceptions import ConfigurationError, GovernanceError
from catalog_governance.core.logging import setup_logging
from catalog_governance.core.perf import PerformanceTracker
from catalog_governance.loader import load_session
from catalog_governance.output import write_report
from catalog_governance.report import build_governance_report

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CRITICAL_FINDINGS = 2


def _print_error(message: str) -> None:
    print(ConsoleColors.error(f"ERROR: {message}"), file=sys.stderr)


def list_periods() -> None:
    """Print every accepted period label with its current date range."""
    print()
    print("=" * BANNER_WIDTH)
    print(ConsoleColors.bold("ACTIVITY PERIODS"))
    print("=" * BANNER_WIDTH)
    for label in PERIODS:
        print(f"  {label:<28} {ConsoleColors.dim(period_caption(label))}")
    print()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the script"""
    load_dotenv()
    args = parse_arguments(argv)

    if args.no_color:
        ConsoleColors.set_enabled(False)

    if args.list_periods:
        list_periods()
        return EXIT_SUCCESS

    try:
        file_settings = load_config_file(args.config) if args.config else {}
        config = GovernanceConfig.from_args(args, file_settings)
        config.validate()
    except ConfigurationError as e:
        _print_error(str(e))
        return EXIT_ERROR

    log_level = config.log.level
    if config.report.quiet and args.log_level is None:
        log_level = "ERROR"
    logger = setup_logging(
        log_level,
        config.log.format,
        log_dir=None if args.no_log_file else args.log_dir,
        max_bytes=config.log.file_max_bytes,
        backup_count=config.log.file_backup_count,
    )

    start_time = time.time()
    try:
        # Fail on a bad period label before any data is fetched
        resolve_period(config.report.period)

        perf = PerformanceTracker(logger)
        session = load_session(config.source, logger=logger, quiet=config.report.quiet, perf_tracker=perf)
        report = build_governance_report(
            session,
            period=config.report.period,
            top_n=config.report.top_n,
            logger=logger,
        )
        written = write_report(
            report,
            config.report.output_format,
            config.report.output_path,
            config.report.output_dir,
            logger,
            quiet=config.report.quiet,
        )
    except GovernanceError as e:
        logger.error(f"Governance report failed: {e}")
        _print_error(str(e))
        return EXIT_ERROR

    files = [path for path in written if path != "stdout"]
    if files and not config.report.quiet:
        print()
        print(ConsoleColors.success(f"Report generated in {time.time() - start_time:.2f}s"))
        for path in files:
            print(f"  {path}")

    if config.report.fail_on_critical and report.has_critical:
        logger.warning("Critical governance findings reported; exiting with code 2")
        return EXIT_CRITICAL_FINDINGS
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
