"""Command-line argument parsing for catalog_governance."""

from __future__ import annotations

import argparse

from catalog_governance.core.constants import OUTPUT_FORMATS
from catalog_governance.core.logging import VALID_LOG_LEVELS
from catalog_governance.core.version import __version__

# Attempt to load argcomplete for shell tab-completion (optional dependency)
_ARGCOMPLETE_AVAILABLE = False
try:
    import argcomplete

    _ARGCOMPLETE_AVAILABLE = True
except ImportError:
    pass  # argcomplete not installed

EPILOG = """
Examples:
  # Governance report for all time from a published bucket
  catalog_governance --data-url https://example.com/governance

  # Last 30 days from a local export
  catalog_governance --data-dir ./exports --period "Last 30 Days"

  # JSON to stdout for scripting
  catalog_governance --data-dir ./exports --format json --output -

  # Every format into one directory
  catalog_governance --data-dir ./exports --format all --output-dir ./reports

  # Fail a CI job when ghost fields are found
  catalog_governance --data-dir ./exports --fail-on-critical --quiet

  # Settings from a JSON config file (CLI flags still win)
  catalog_governance --config governance.json

Environment:
  GOVERNANCE_DATA_URL, GOVERNANCE_DATA_DIR, GOVERNANCE_DATA_VERSION, LOG_LEVEL
  (also read from a .env file in the working directory)

Exit codes:
  0  success
  1  configuration, load or output error
  2  critical findings with --fail-on-critical
"""


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Every setting that can also come from a config file or the environment
    defaults to None so that an unset flag never masks those sources.
    """
    parser = argparse.ArgumentParser(
        prog="catalog_governance",
        description="Catalog Governance - field usage, saturation and ghost field analytics for content catalogs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )

    source_group = parser.add_argument_group("Data source")
    source_group.add_argument(
        "--data-url",
        dest="data_base_url",
        metavar="URL",
        help="Base URL holding the CSV tables (env: GOVERNANCE_DATA_URL)",
    )
    source_group.add_argument(
        "--data-dir",
        metavar="DIR",
        help="Local directory holding the CSV tables (env: GOVERNANCE_DATA_DIR)",
    )
    source_group.add_argument(
        "--data-version",
        metavar="VERSION",
        help="Cache-busting version for table URLs (default: last refresh timestamp)",
    )
    source_group.add_argument(
        "--timeout",
        dest="timeout_seconds",
        type=float,
        metavar="SECONDS",
        help="Network timeout per request (default: 30)",
    )
    source_group.add_argument(
        "--chunk-size",
        dest="block_chunk_size",
        type=int,
        metavar="ROWS",
        help="Rows per chunk when streaming the block table (default: 5000)",
    )
    source_group.add_argument(
        "--workers",
        dest="fetch_workers",
        type=int,
        metavar="N",
        help="Parallel fetches for the small tables (default: 4)",
    )
    source_group.add_argument(
        "--config",
        metavar="FILE",
        help="JSON config file with default settings",
    )

    report_group = parser.add_argument_group("Report")
    report_group.add_argument(
        "--period",
        metavar="LABEL",
        help='Activity period (default: "All Time"); see --list-periods',
    )
    report_group.add_argument(
        "--top-n",
        type=int,
        metavar="N",
        help="Number of top fields to list (default: 15)",
    )
    report_group.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        help="Output format (default: console)",
    )
    report_group.add_argument(
        "--output",
        metavar="PATH",
        help='Output file or directory; "-" writes JSON or Markdown to stdout',
    )
    report_group.add_argument(
        "--output-dir",
        metavar="DIR",
        help="Directory for generated files (default: current directory)",
    )
    report_group.add_argument(
        "--fail-on-critical",
        action="store_true",
        default=None,
        help="Exit with code 2 when a critical finding is reported",
    )
    report_group.add_argument(
        "--list-periods",
        action="store_true",
        help="List the accepted period labels and exit",
    )

    log_group = parser.add_argument_group("Logging and display")
    log_group.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        help="Logging level (env: LOG_LEVEL, default: INFO)",
    )
    log_group.add_argument(
        "--log-format",
        choices=("text", "json"),
        help="Log output format (default: text)",
    )
    log_group.add_argument(
        "--log-dir",
        default="logs",
        metavar="DIR",
        help="Directory for rotating log files (default: logs)",
    )
    log_group.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to the console only",
    )
    log_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        default=None,
        help="Suppress console report and progress output; log errors only",
    )
    log_group.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored console output",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Enable shell tab-completion if argcomplete is installed
    if _ARGCOMPLETE_AVAILABLE:
        argcomplete.autocomplete(parser)

    return parser


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments"""
    return build_parser().parse_args(argv)
