"""Console rendering of a governance report."""

from __future__ import annotations

from catalog_governance.core.colors import ConsoleColors
from catalog_governance.core.constants import REPORT_WIDTH
from catalog_governance.report import GovernanceReport

_SEVERITY_LABELS = {
    "critical": "[CRITICAL]",
    "warning": "[WARNING]",
    "info": "[INFO]",
    "success": "[OK]",
}


def _render_bar(count: int, total: int, width: int = 30) -> str:
    """Render an ASCII bar like "████████░░░░ 45%"."""
    if total <= 0:
        return "░" * width + "   0%"
    filled = round(width * count / total)
    filled = max(0, min(width, filled))
    percent = count / total * 100
    return "█" * filled + "░" * (width - filled) + f" {percent:3.0f}%"


def _truncate(text: str, width: int) -> str:
    return text[: width - 2] + ".." if len(text) > width else text


def _section(title: str) -> None:
    print()
    print("-" * REPORT_WIDTH)
    print(ConsoleColors.bold(title))
    print("-" * REPORT_WIDTH)


def write_report_console(report: GovernanceReport, quiet: bool = False) -> None:
    """Print the report with KPIs, insights and field rankings.

    Args:
        report: Computed report
        quiet: Suppress all output
    """
    if quiet:
        return

    kpis = report.kpis
    print()
    print("=" * REPORT_WIDTH)
    print(ConsoleColors.bold("CATALOG GOVERNANCE REPORT"))
    print("=" * REPORT_WIDTH)
    print(f"Period: {report.period} ({report.period_caption})")
    print(f"Generated: {report.generated_at}")
    if report.refresh_caption:
        print(report.refresh_caption)
    if report.source:
        print(f"Source: {report.source}")

    _section("KEY METRICS")
    print(f"{'In-scope assets':<30} {report.in_scope_asset_count:>10,}")
    print(f"{'Campaigns':<30} {kpis.campaigns:>10,}")
    print(f"{'Canvases':<30} {kpis.canvases:>10,}")
    print(f"{'Catalog fields':<30} {kpis.catalog_field_count:>10,}")
    print(f"{'Fields in use':<30} {kpis.used_field_count:>10,}")
    print(f"{'Catalog saturation':<30} {_render_bar(kpis.used_field_count, kpis.catalog_field_count)}")

    _section("INSIGHTS")
    for insight in report.insights.insights:
        kind = insight.kind.value
        label = ConsoleColors.for_insight(kind, f"{_SEVERITY_LABELS.get(kind, kind.upper()):<11}")
        print(f"{label} {ConsoleColors.bold(insight.title)}")
        print(f"{'':<12}{insight.message}")

    _section(f"TOP FIELDS (top {len(report.top_fields)})")
    if not report.top_fields:
        print(ConsoleColors.dim("No field usage data for this period."))
    else:
        max_refs = report.top_fields[0].references
        print(f"{'#':>3}  {'Field':<45} {'Refs':>8}")
        for rank, field in enumerate(report.top_fields, start=1):
            bar = "█" * max(1, round(20 * field.references / max_refs)) if max_refs else ""
            print(f"{rank:>3}  {_truncate(field.field_name, 45):<45} {field.references:>8,}  {ConsoleColors.info(bar)}")
        if report.pareto_crossing_rank is not None:
            print()
            print(
                f"Top {report.pareto_crossing_rank} of {len(report.pareto)} referenced fields "
                "account for 80% of references."
            )

    if report.ghost_fields:
        _section("GHOST FIELDS")
        print(f"{'Ghost Field':<50} {'Occurrences':>12} {'Assets':>10}")
        for ghost in report.ghost_fields:
            print(
                f"{ConsoleColors.error(f'{_truncate(ghost.field_name, 50):<50}')} "
                f"{ghost.occurrences:>12,} {ghost.affected_assets:>10,}"
            )

    counts = report.dataset_counts
    if counts.get("unresolved_references"):
        print()
        print(
            ConsoleColors.warning(
                f"Note: {counts['unresolved_references']:,} of {counts.get('references', 0):,} references "
                "could not be matched to an asset and are excluded."
            )
        )

    print()
    print("=" * REPORT_WIDTH)
    print(ConsoleColors.dim(f"Report computed in {report.duration:.2f}s"))
