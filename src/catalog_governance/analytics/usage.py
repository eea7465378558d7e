"""
Field usage analytics.

Rankings, the field x asset-type cross-tab, per-field asset impact, the
cumulative (Pareto) usage series, the monthly activity timeline and the
ghost field table. Every function takes the session and the in-scope id
set and is free of side effects.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any

from catalog_governance.analytics.scope import (
    count_by_field,
    ghost_references,
    in_scope_assets,
    rank_fields,
    usage_references,
)
from catalog_governance.core.constants import (
    ASSET_TYPE_CAMPAIGN,
    ASSET_TYPE_CANVAS,
    CROSS_TAB_FIELD_LIMIT,
    DEFAULT_TOP_FIELDS,
    FIELD_IMPACT_LIMIT,
    PARETO_THRESHOLD_PERCENT,
    TRACKED_ASSET_TYPES,
)
from catalog_governance.session import GovernanceSession


@dataclass(frozen=True)
class FieldCount:
    field_name: str
    references: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_top_fields(
    session: GovernanceSession, ids: frozenset[str] | set[str], n: int = DEFAULT_TOP_FIELDS
) -> list[FieldCount]:
    """Most referenced in-scope fields, at most ``n``, by descending count.

    Fields with equal counts keep the order they were first seen in.
    """
    if n <= 0:
        return []
    ranked = rank_fields(count_by_field(usage_references(session, ids)))
    return [FieldCount(name, count) for name, count in ranked[:n]]


# ==================== CROSS-TAB ====================


@dataclass(frozen=True)
class CrossTab:
    """Reference counts for the top fields split by asset type.

    ``counts[i][j]`` is the count for ``fields[i]`` and ``asset_types[j]``.
    """

    fields: tuple[str, ...]
    asset_types: tuple[str, ...]
    counts: tuple[tuple[int, ...], ...]

    def rows(self) -> list[dict[str, Any]]:
        return [
            {"field_name": name, **dict(zip(self.asset_types, row, strict=True))}
            for name, row in zip(self.fields, self.counts, strict=True)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "fields": list(self.fields),
            "asset_types": list(self.asset_types),
            "counts": [list(row) for row in self.counts],
        }


def compute_cross_tab(
    session: GovernanceSession, ids: frozenset[str] | set[str], limit: int = CROSS_TAB_FIELD_LIMIT
) -> CrossTab:
    """Field x {Campaign, Canvas} counts for the top ``limit`` fields.

    Fields are ranked by their total count over every asset type, so a field
    used mostly by other asset types can appear with low Campaign/Canvas cells.
    """
    by_type: Counter[tuple[str, str]] = Counter()
    totals: Counter[str] = Counter()
    for ref in usage_references(session, ids):
        by_type[(ref.field_name, ref.asset_type)] += 1
        totals[ref.field_name] += 1

    fields = tuple(name for name, _ in rank_fields(totals)[:limit])
    return CrossTab(
        fields=fields,
        asset_types=TRACKED_ASSET_TYPES,
        counts=tuple(tuple(by_type[(name, t)] for t in TRACKED_ASSET_TYPES) for name in fields),
    )


# ==================== FIELD IMPACT ====================


@dataclass(frozen=True)
class FieldImpact:
    """Distinct assets referencing a field, per tracked asset type."""

    field_name: str
    campaigns: int
    canvases: int

    @property
    def total(self) -> int:
        return self.campaigns + self.canvases

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "total": self.total}


def compute_field_impact(
    session: GovernanceSession, ids: frozenset[str] | set[str], limit: int = FIELD_IMPACT_LIMIT
) -> list[FieldImpact]:
    """Per-field distinct Campaign and Canvas asset counts, top ``limit`` by total."""
    assets: dict[str, dict[str, set[str]]] = {}
    for ref in usage_references(session, ids):
        if not ref.is_tracked_type:
            continue
        per_type = assets.setdefault(ref.field_name, {t: set() for t in TRACKED_ASSET_TYPES})
        per_type[ref.asset_type].add(ref.asset_id)

    rows = [
        FieldImpact(name, len(per_type[ASSET_TYPE_CAMPAIGN]), len(per_type[ASSET_TYPE_CANVAS]))
        for name, per_type in assets.items()
    ]
    rows.sort(key=lambda row: row.total, reverse=True)
    return rows[:limit]


# ==================== PARETO ====================


@dataclass(frozen=True)
class ParetoPoint:
    rank: int
    field_name: str
    references: int
    cumulative_percent: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_pareto_series(session: GovernanceSession, ids: frozenset[str] | set[str]) -> list[ParetoPoint]:
    """Cumulative share of references covered by the top-K fields, for every K."""
    ranked = rank_fields(count_by_field(usage_references(session, ids)))
    total = sum(count for _, count in ranked)

    series = []
    running = 0
    for rank, (name, count) in enumerate(ranked, start=1):
        running += count
        series.append(ParetoPoint(rank, name, count, running * 100 / total if total else 0.0))
    return series


def pareto_crossing_rank(series: list[ParetoPoint], threshold: float = PARETO_THRESHOLD_PERCENT) -> int | None:
    """First rank whose cumulative share reaches ``threshold``, or None."""
    for point in series:
        if point.cumulative_percent >= threshold:
            return point.rank
    return None


# ==================== TIMELINE ====================


@dataclass(frozen=True)
class Timeline:
    """Active asset counts per (month, asset type).

    Attributes:
        months: Month keys ("YYYY-MM"), ascending
        counts: Mapping of (month, asset type) to count; blank types are "Unknown"
    """

    months: tuple[str, ...]
    counts: dict[tuple[str, str], int] = field(default_factory=dict)

    def series(self, asset_type: str) -> list[int]:
        """Count per month for one asset type, zero-filled."""
        return [self.counts.get((month, asset_type), 0) for month in self.months]

    @property
    def asset_types(self) -> list[str]:
        return sorted({asset_type for _, asset_type in self.counts})

    def rows(self) -> list[dict[str, Any]]:
        return [
            {"month": month, "asset_type": asset_type, "assets": count}
            for (month, asset_type), count in sorted(self.counts.items())
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "months": list(self.months),
            "series": {t: self.series(t) for t in TRACKED_ASSET_TYPES},
            "rows": self.rows(),
        }


def compute_timeline(session: GovernanceSession, ids: frozenset[str] | set[str]) -> Timeline:
    """Bucket in-scope assets by month of last activity and asset type."""
    counts: defaultdict[tuple[str, str], int] = defaultdict(int)
    months = set()
    for asset in in_scope_assets(session, ids):
        month = asset.last_active.strftime("%Y-%m")
        counts[(month, asset.type_bucket)] += 1
        months.add(month)
    return Timeline(months=tuple(sorted(months)), counts=dict(counts))


# ==================== GHOST FIELDS ====================


@dataclass(frozen=True)
class GhostField:
    field_name: str
    occurrences: int
    affected_assets: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_ghost_fields(session: GovernanceSession, ids: frozenset[str] | set[str]) -> list[GhostField]:
    """Risk-flagged fields in scope with occurrence and distinct asset counts."""
    occurrences: Counter[str] = Counter()
    assets: defaultdict[str, set[str]] = defaultdict(set)
    for ref in ghost_references(session, ids):
        occurrences[ref.field_name] += 1
        assets[ref.field_name].add(ref.asset_id)
    return [GhostField(name, count, len(assets[name])) for name, count in rank_fields(occurrences)]
