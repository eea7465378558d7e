"""Report writers - console, JSON, CSV, Excel and Markdown."""

from __future__ import annotations

import logging
from pathlib import Path

from catalog_governance.core.exceptions import OutputError
from catalog_governance.output.console import write_report_console
from catalog_governance.output.frames import report_frames
from catalog_governance.output.writers import (
    build_report_json_data,
    render_report_markdown,
    write_report_csv,
    write_report_excel,
    write_report_json,
    write_report_markdown,
)
from catalog_governance.report import GovernanceReport

FILE_WRITERS = {
    "json": write_report_json,
    "csv": write_report_csv,
    "excel": write_report_excel,
    "markdown": write_report_markdown,
}


def write_report(
    report: GovernanceReport,
    output_format: str,
    output_path: str | Path | None,
    output_dir: str | Path,
    logger: logging.Logger,
    quiet: bool = False,
) -> list[str]:
    """Write a report in one format, or every format for "all".

    Returns:
        Paths of the files or directories written
    """
    if output_format == "console":
        write_report_console(report, quiet=quiet)
        return []

    if output_format == "all":
        # Each format gets its own default file name
        write_report_console(report, quiet=quiet)
        return [writer(report, None, output_dir, logger) for writer in FILE_WRITERS.values()]

    writer = FILE_WRITERS.get(output_format)
    if writer is None:
        raise OutputError(f"Unsupported output format: {output_format}", output_format=output_format)
    return [writer(report, output_path, output_dir, logger)]


__all__ = [
    "FILE_WRITERS",
    "build_report_json_data",
    "render_report_markdown",
    "report_frames",
    "write_report",
    "write_report_console",
    "write_report_csv",
    "write_report_excel",
    "write_report_json",
    "write_report_markdown",
]
