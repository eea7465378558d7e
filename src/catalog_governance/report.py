"""
Governance report assembly.

``build_governance_report`` runs every query for one period and bundles
the results with the captions and dataset counts the writers need.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from catalog_governance.analytics.insights import InsightResult, compute_insights
from catalog_governance.analytics.kpis import KpiSummary, compute_kpis
from catalog_governance.analytics.periods import period_caption, resolve_period, to_day
from catalog_governance.analytics.scope import get_in_scope_asset_ids
from catalog_governance.analytics.usage import (
    CrossTab,
    FieldCount,
    FieldImpact,
    GhostField,
    ParetoPoint,
    Timeline,
    compute_cross_tab,
    compute_field_impact,
    compute_ghost_fields,
    compute_pareto_series,
    compute_timeline,
    compute_top_fields,
    pareto_crossing_rank,
)
from catalog_governance.core.constants import DEFAULT_PERIOD, DEFAULT_TOP_FIELDS, REFRESH_DISPLAY_TIMEZONE
from catalog_governance.data.parsing import format_refresh_caption
from catalog_governance.session import GovernanceSession


@dataclass
class GovernanceReport:
    """All governance views for one period.

    Attributes:
        period: Selected period label
        period_caption: "All time" or the resolved date span
        generated_at: When the report was built (ISO timestamp)
        refresh_caption: Last refresh caption, empty when unknown
        source: Location the data was loaded from
        in_scope_asset_count: Size of the in-scope asset set
        kpis: Headline numbers
        insights: Ordered findings plus ghost counts
        top_fields: Most referenced fields
        cross_tab: Field x asset type counts
        field_impact: Distinct assets per field
        pareto: Cumulative usage series
        pareto_crossing_rank: Rank at which cumulative usage reaches 80%
        timeline: Monthly activity
        ghost_fields: Risk-flagged fields with occurrence counts
        dataset_counts: Row counts of the loaded tables
        duration: Seconds spent computing the report
    """

    period: str
    period_caption: str
    generated_at: str
    refresh_caption: str
    source: str
    in_scope_asset_count: int
    kpis: KpiSummary
    insights: InsightResult
    top_fields: list[FieldCount] = field(default_factory=list)
    cross_tab: CrossTab | None = None
    field_impact: list[FieldImpact] = field(default_factory=list)
    pareto: list[ParetoPoint] = field(default_factory=list)
    pareto_crossing_rank: int | None = None
    timeline: Timeline | None = None
    ghost_fields: list[GhostField] = field(default_factory=list)
    dataset_counts: dict[str, int] = field(default_factory=dict)
    duration: float = 0.0

    @property
    def has_critical(self) -> bool:
        return self.insights.has_critical

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "period_caption": self.period_caption,
            "generated_at": self.generated_at,
            "refresh_caption": self.refresh_caption,
            "source": self.source,
            "in_scope_asset_count": self.in_scope_asset_count,
            "dataset_counts": dict(self.dataset_counts),
            "kpis": self.kpis.to_dict(),
            **self.insights.to_dict(),
            "top_fields": [f.to_dict() for f in self.top_fields],
            "cross_tab": self.cross_tab.to_dict() if self.cross_tab else None,
            "field_impact": [f.to_dict() for f in self.field_impact],
            "pareto": [p.to_dict() for p in self.pareto],
            "pareto_crossing_rank": self.pareto_crossing_rank,
            "timeline": self.timeline.to_dict() if self.timeline else None,
            "ghost_fields": [g.to_dict() for g in self.ghost_fields],
            "duration": round(self.duration, 3),
        }


def build_governance_report(
    session: GovernanceSession,
    period: str = DEFAULT_PERIOD,
    top_n: int = DEFAULT_TOP_FIELDS,
    now: date | datetime | None = None,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> GovernanceReport:
    """Compute every governance view for ``period``.

    Args:
        session: Loaded dataset
        period: Period label
        top_n: Number of top fields to keep
        now: Reference instant (defaults to the current local time)
        logger: Logger instance

    Raises:
        PeriodError: If the period label is unknown
    """
    logger = logger or logging.getLogger(__name__)
    start_time = time.time()
    reference = now if now is not None else datetime.now()

    # Resolve first so an unknown label fails before any work
    resolve_period(period, reference)
    ids = get_in_scope_asset_ids(session, period, reference)
    logger.info(f"Period '{period}': {len(ids)} of {len(session.assets)} assets in scope")

    pareto = compute_pareto_series(session, ids)
    insights = compute_insights(session, ids, to_day(reference))
    if insights.ghost_field_count:
        logger.warning(
            f"{insights.ghost_field_count} ghost fields referenced {insights.ghost_reference_count} times in scope"
        )

    report = GovernanceReport(
        period=period,
        period_caption=period_caption(period, reference),
        generated_at=datetime.now().isoformat(timespec="seconds"),
        refresh_caption=format_refresh_caption(session.refresh, REFRESH_DISPLAY_TIMEZONE),
        source=session.source,
        in_scope_asset_count=len(ids),
        kpis=compute_kpis(session, ids),
        insights=insights,
        top_fields=compute_top_fields(session, ids, top_n),
        cross_tab=compute_cross_tab(session, ids),
        field_impact=compute_field_impact(session, ids),
        pareto=pareto,
        pareto_crossing_rank=pareto_crossing_rank(pareto),
        timeline=compute_timeline(session, ids),
        ghost_fields=compute_ghost_fields(session, ids),
        dataset_counts=session.dataset_counts(),
    )
    report.duration = time.time() - start_time
    logger.info(f"Report computed in {report.duration:.2f}s")
    return report
