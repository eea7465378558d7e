"""Analytics - period resolution, activity filtering, KPIs, insights and usage."""

from catalog_governance.analytics.insights import (
    INSIGHT_RULES,
    Insight,
    InsightKind,
    InsightResult,
    compute_insights,
    count_ghost_fields,
)
from catalog_governance.analytics.kpis import KpiSummary, compute_kpis, compute_saturation
from catalog_governance.analytics.periods import DateRange, period_caption, resolve_period
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

__all__ = [
    # Periods & scope
    "DateRange",
    "get_in_scope_asset_ids",
    "period_caption",
    "resolve_period",
    # KPIs
    "KpiSummary",
    "compute_kpis",
    "compute_saturation",
    # Insights
    "INSIGHT_RULES",
    "Insight",
    "InsightKind",
    "InsightResult",
    "compute_insights",
    "count_ghost_fields",
    # Usage
    "CrossTab",
    "FieldCount",
    "FieldImpact",
    "GhostField",
    "ParetoPoint",
    "Timeline",
    "compute_cross_tab",
    "compute_field_impact",
    "compute_ghost_fields",
    "compute_pareto_series",
    "compute_timeline",
    "compute_top_fields",
    "pareto_crossing_rank",
]
