"""Tabular views of a governance report, shared by the CSV and Excel writers."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

import pandas as pd

from catalog_governance.core.constants import ASSET_TYPE_CAMPAIGN, ASSET_TYPE_CANVAS, TRACKED_ASSET_TYPES
from catalog_governance.report import GovernanceReport


def report_basename(report: GovernanceReport) -> str:
    """Default file stem, e.g. ``governance_report_last_30_days_20260101_120000``."""
    slug = re.sub(r"[^a-z0-9]+", "_", report.period.lower()).strip("_") or "report"
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"governance_report_{slug}_{timestamp}"


def resolve_output_file(output_path: str | Path | None, output_dir: str | Path, stem: str, suffix: str) -> Path:
    """Use ``output_path`` (adding ``suffix`` when missing) or ``output_dir/stem+suffix``."""
    if output_path:
        path = Path(output_path)
        return path if path.suffix == suffix else Path(f"{path}{suffix}")
    return Path(output_dir) / f"{stem}{suffix}"


def summary_frame(report: GovernanceReport) -> pd.DataFrame:
    kpis = report.kpis
    counts = report.dataset_counts
    rows = [
        ("Period", report.period),
        ("Period Range", report.period_caption),
        ("Generated At", report.generated_at),
        ("Last Refresh", report.refresh_caption or "Unknown"),
        ("Source", report.source),
        ("In-Scope Assets", report.in_scope_asset_count),
        ("Campaigns", kpis.campaigns),
        ("Canvases", kpis.canvases),
        ("Catalog Fields", kpis.catalog_field_count),
        ("Fields In Use", kpis.used_field_count),
        ("Catalog Saturation (%)", round(kpis.saturation_percent, 1)),
        ("Ghost Fields", report.insights.ghost_field_count),
        ("Ghost References", report.insights.ghost_reference_count),
        ("Pareto 80% Rank", report.pareto_crossing_rank if report.pareto_crossing_rank is not None else ""),
        ("Total Assets", counts.get("assets", 0)),
        ("Total References", counts.get("references", 0)),
        ("Unresolved References", counts.get("unresolved_references", 0)),
        ("Dependencies", counts.get("dependencies", 0)),
        ("Indexed Blocks", counts.get("indexed_blocks", 0)),
    ]
    return pd.DataFrame(rows, columns=["Metric", "Value"])


def insights_frame(report: GovernanceReport) -> pd.DataFrame:
    rows = [
        {"Severity": i.kind.value, "Title": i.title, "Message": i.message} for i in report.insights.insights
    ]
    return pd.DataFrame(rows, columns=["Severity", "Title", "Message"])


def top_fields_frame(report: GovernanceReport) -> pd.DataFrame:
    rows = [
        {"Rank": rank, "Field": f.field_name, "References": f.references}
        for rank, f in enumerate(report.top_fields, start=1)
    ]
    return pd.DataFrame(rows, columns=["Rank", "Field", "References"])


def cross_tab_frame(report: GovernanceReport) -> pd.DataFrame:
    columns = ["Field", *TRACKED_ASSET_TYPES]
    if report.cross_tab is None:
        return pd.DataFrame(columns=columns)
    rows = [[name, *row] for name, row in zip(report.cross_tab.fields, report.cross_tab.counts, strict=True)]
    return pd.DataFrame(rows, columns=columns)


def field_impact_frame(report: GovernanceReport) -> pd.DataFrame:
    rows = [
        {"Field": f.field_name, "Campaigns": f.campaigns, "Canvases": f.canvases, "Total": f.total}
        for f in report.field_impact
    ]
    return pd.DataFrame(rows, columns=["Field", "Campaigns", "Canvases", "Total"])


def pareto_frame(report: GovernanceReport) -> pd.DataFrame:
    rows = [
        {
            "Rank": p.rank,
            "Field": p.field_name,
            "References": p.references,
            "Cumulative %": round(p.cumulative_percent, 2),
        }
        for p in report.pareto
    ]
    return pd.DataFrame(rows, columns=["Rank", "Field", "References", "Cumulative %"])


def timeline_frame(report: GovernanceReport) -> pd.DataFrame:
    """One row per month with a column per asset type present."""
    timeline = report.timeline
    if timeline is None or not timeline.months:
        return pd.DataFrame(columns=["Month", ASSET_TYPE_CAMPAIGN, ASSET_TYPE_CANVAS])
    asset_types = list(TRACKED_ASSET_TYPES) + [t for t in timeline.asset_types if t not in TRACKED_ASSET_TYPES]
    data = {"Month": list(timeline.months)}
    for asset_type in asset_types:
        data[asset_type] = timeline.series(asset_type)
    return pd.DataFrame(data)


def ghost_fields_frame(report: GovernanceReport) -> pd.DataFrame:
    rows = [
        {"Ghost Field": g.field_name, "Occurrences": g.occurrences, "Affected Assets": g.affected_assets}
        for g in report.ghost_fields
    ]
    return pd.DataFrame(rows, columns=["Ghost Field", "Occurrences", "Affected Assets"])


# Sheet / file name -> builder, in output order
REPORT_TABLES = {
    "Summary": summary_frame,
    "Insights": insights_frame,
    "Top Fields": top_fields_frame,
    "Cross Tab": cross_tab_frame,
    "Field Impact": field_impact_frame,
    "Pareto": pareto_frame,
    "Timeline": timeline_frame,
    "Ghost Fields": ghost_fields_frame,
}


def report_frames(report: GovernanceReport) -> dict[str, pd.DataFrame]:
    """Build every report table, keyed by display name."""
    return {name: builder(report) for name, builder in REPORT_TABLES.items()}
