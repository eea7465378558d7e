"""CLI - argument parsing and the catalog_governance entry point."""

from catalog_governance.cli.main import main
from catalog_governance.cli.parser import build_parser, parse_arguments

__all__ = ["build_parser", "main", "parse_arguments"]
