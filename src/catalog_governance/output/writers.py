"""
File writers for governance reports.

JSON, CSV (one directory of tables), Excel (one sheet per table) and
Markdown. Each writer returns the path it created, or "stdout" when the
report was streamed with an output path of "-".
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import pandas as pd

from catalog_governance.core.exceptions import OutputError
from catalog_governance.core.version import __version__
from catalog_governance.output.frames import (
    report_basename,
    report_frames,
    resolve_output_file,
)
from catalog_governance.report import GovernanceReport

STDOUT_TARGET = "-"

# Excel column widths per sheet (first column, remaining columns)
_SHEET_WIDTHS = {
    "Summary": (28, 40),
    "Insights": (12, 60),
    "Cross Tab": (40, 12),
    "Field Impact": (40, 12),
    "Ghost Fields": (40, 16),
}


def _is_stdout(output_path: str | Path | None) -> bool:
    return output_path is not None and str(output_path) == STDOUT_TARGET


def _reject_stdout(output_path: str | Path | None, output_format: str) -> None:
    if _is_stdout(output_path):
        raise OutputError(
            f"{output_format} output cannot be written to stdout",
            output_path=STDOUT_TARGET,
            output_format=output_format,
        )


# ==================== JSON ====================


def build_report_json_data(report: GovernanceReport) -> dict[str, Any]:
    """Build the JSON document for a report."""
    data = report.to_dict()
    data["tool_version"] = __version__
    return data


def write_report_json(
    report: GovernanceReport,
    output_path: str | Path | None,
    output_dir: str | Path,
    logger: logging.Logger,
) -> str:
    """Write a report as structured JSON.

    Args:
        report: Computed report
        output_path: Target file, "-" for stdout, or None for a timestamped file
        output_dir: Directory used when no output path is given
        logger: Logger instance

    Returns:
        Path to the created JSON file, or "stdout"
    """
    json_data = build_report_json_data(report)

    if _is_stdout(output_path):
        json.dump(json_data, sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
        return "stdout"

    file_path = resolve_output_file(output_path, output_dir, report_basename(report), ".json")
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(json_data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise OutputError(
            "Failed to write JSON report",
            output_path=str(file_path),
            output_format="json",
            details=str(e),
            original_error=e,
        ) from e

    logger.info(f"JSON report written to {file_path}")
    return str(file_path)


# ==================== CSV ====================


def write_report_csv(
    report: GovernanceReport,
    output_path: str | Path | None,
    output_dir: str | Path,
    logger: logging.Logger,
) -> str:
    """Write each report table to its own CSV file inside one directory.

    Creates summary.csv, insights.csv, top_fields.csv, cross_tab.csv,
    field_impact.csv, pareto.csv, timeline.csv and ghost_fields.csv.

    Returns:
        Path to the directory containing the CSV files
    """
    _reject_stdout(output_path, "csv")
    if output_path:
        csv_dir = Path(output_path)
        if csv_dir.suffix == ".csv":
            csv_dir = csv_dir.parent / csv_dir.stem
    else:
        csv_dir = Path(output_dir) / report_basename(report)

    try:
        csv_dir.mkdir(parents=True, exist_ok=True)
        for name, df in report_frames(report).items():
            filename = name.lower().replace(" ", "_") + ".csv"
            df.to_csv(csv_dir / filename, index=False, encoding="utf-8")
            logger.debug(f"  Created: {filename}")
    except OSError as e:
        raise OutputError(
            "Failed to write CSV report",
            output_path=str(csv_dir),
            output_format="csv",
            details=str(e),
            original_error=e,
        ) from e

    logger.info(f"CSV report written to {csv_dir}")
    return str(csv_dir)


# ==================== EXCEL ====================


def write_report_excel(
    report: GovernanceReport,
    output_path: str | Path | None,
    output_dir: str | Path,
    logger: logging.Logger,
) -> str:
    """Write the report as a multi-sheet Excel workbook.

    Sheets follow the table order of the CSV output. The Insights sheet
    colors each row by severity.

    Returns:
        Path to the created Excel file
    """
    _reject_stdout(output_path, "excel")
    file_path = resolve_output_file(output_path, output_dir, report_basename(report), ".xlsx")

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(file_path, engine="xlsxwriter") as writer:
            workbook = writer.book
            header_format = workbook.add_format({"bold": True, "bg_color": "#1e293b", "font_color": "#ffffff"})
            severity_formats = {
                "critical": workbook.add_format({"bg_color": "#f8d7da"}),
                "warning": workbook.add_format({"bg_color": "#fff3cd"}),
                "info": workbook.add_format({"bg_color": "#d1ecf1"}),
                "success": workbook.add_format({"bg_color": "#d4edda"}),
            }

            for sheet_name, df in report_frames(report).items():
                df.to_excel(writer, sheet_name=sheet_name, index=False)
                worksheet = writer.sheets[sheet_name]
                for col_num, column in enumerate(df.columns):
                    worksheet.write(0, col_num, column, header_format)

                first_width, other_width = _SHEET_WIDTHS.get(sheet_name, (30, 14))
                worksheet.set_column(0, 0, first_width)
                if len(df.columns) > 1:
                    worksheet.set_column(1, len(df.columns) - 1, other_width)
                worksheet.freeze_panes(1, 0)

                if sheet_name == "Insights":
                    for row_num, severity in enumerate(df["Severity"], start=1):
                        fmt = severity_formats.get(severity)
                        if fmt is not None:
                            worksheet.set_row(row_num, None, fmt)
    except OSError as e:
        raise OutputError(
            "Failed to write Excel report",
            output_path=str(file_path),
            output_format="excel",
            details=str(e),
            original_error=e,
        ) from e

    logger.info(f"Excel report written to {file_path}")
    return str(file_path)


# ==================== MARKDOWN ====================


def _md_escape(value: Any) -> str:
    return str(value).replace("|", "\\|")


def _md_table(headers: list[str], rows: list[list[Any]]) -> list[str]:
    lines = [
        "| " + " | ".join(headers) + " |",
        "|" + "|".join("---" for _ in headers) + "|",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_md_escape(v) for v in row) + " |")
    return lines


_SEVERITY_ICONS = {"critical": "🔴", "warning": "🟡", "info": "🔵", "success": "🟢"}


def render_report_markdown(report: GovernanceReport) -> str:
    """Render the report as GitHub-flavored markdown."""
    kpis = report.kpis
    lines = [
        "# Catalog Governance Report",
        "",
        f"**Period:** {report.period} ({report.period_caption})",
        f"**Generated:** {report.generated_at}",
    ]
    if report.refresh_caption:
        lines.append(f"**{report.refresh_caption}**")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.extend(
        _md_table(
            ["Metric", "Value"],
            [
                ["In-Scope Assets", f"{report.in_scope_asset_count:,}"],
                ["Campaigns", f"{kpis.campaigns:,}"],
                ["Canvases", f"{kpis.canvases:,}"],
                ["Catalog Fields", f"{kpis.catalog_field_count:,}"],
                ["Catalog Saturation", f"{kpis.saturation_percent:.1f}%"],
                ["Ghost Fields", f"{report.insights.ghost_field_count:,}"],
            ],
        )
    )
    lines.append("")

    lines.append("## Insights")
    lines.append("")
    for insight in report.insights.insights:
        icon = _SEVERITY_ICONS.get(insight.kind.value, "")
        lines.append(f"- {icon} **{insight.title}**: {insight.message}")
    lines.append("")

    if report.top_fields:
        lines.append("## Top Fields")
        lines.append("")
        lines.extend(
            _md_table(
                ["Rank", "Field", "References"],
                [[rank, f"`{f.field_name}`", f.references] for rank, f in enumerate(report.top_fields, start=1)],
            )
        )
        lines.append("")
        if report.pareto_crossing_rank is not None:
            lines.append(
                f"The top {report.pareto_crossing_rank} field(s) account for 80% of all in-scope references."
            )
            lines.append("")

    if report.field_impact:
        lines.append("## Field Impact")
        lines.append("")
        lines.extend(
            _md_table(
                ["Field", "Campaigns", "Canvases", "Total"],
                [[f"`{f.field_name}`", f.campaigns, f.canvases, f.total] for f in report.field_impact],
            )
        )
        lines.append("")

    if report.ghost_fields:
        lines.append("## Ghost Fields")
        lines.append("")
        lines.extend(
            _md_table(
                ["Ghost Field", "Occurrences", "Affected Assets"],
                [[f"`{g.field_name}`", g.occurrences, g.affected_assets] for g in report.ghost_fields],
            )
        )
        lines.append("")

    if report.timeline is not None and report.timeline.months:
        lines.append("## Activity Timeline")
        lines.append("")
        campaigns = report.timeline.series("Campaign")
        canvases = report.timeline.series("Canvas")
        lines.extend(
            _md_table(
                ["Month", "Campaigns", "Canvases"],
                [list(row) for row in zip(report.timeline.months, campaigns, canvases, strict=True)],
            )
        )
        lines.append("")

    return "\n".join(lines)


def write_report_markdown(
    report: GovernanceReport,
    output_path: str | Path | None,
    output_dir: str | Path,
    logger: logging.Logger,
) -> str:
    """Write the report as markdown to a file, or to stdout for "-"."""
    content = render_report_markdown(report)

    if _is_stdout(output_path):
        sys.stdout.write(content + "\n")
        return "stdout"

    file_path = resolve_output_file(output_path, output_dir, report_basename(report), ".md")
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content + "\n", encoding="utf-8")
    except OSError as e:
        raise OutputError(
            "Failed to write Markdown report",
            output_path=str(file_path),
            output_format="markdown",
            details=str(e),
            original_error=e,
        ) from e

    logger.info(f"Markdown report written to {file_path}")
    return str(file_path)
