"""
Governance insight engine.

A fixed, ordered tuple of rule functions is evaluated against the
in-scope dataset. Each rule returns one ``Insight`` or None. When no rule
fires, a single "All Systems Operational" finding is emitted instead.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any

from catalog_governance.analytics.kpis import compute_saturation
from catalog_governance.analytics.periods import to_day
from catalog_governance.analytics.scope import (
    count_by_field,
    ghost_references,
    in_scope_assets,
    usage_references,
)
from catalog_governance.core.constants import (
    HIGH_UTILIZATION_THRESHOLD,
    LOW_UTILIZATION_THRESHOLD,
    STALE_ASSET_DAYS,
)
from catalog_governance.session import GovernanceSession


class InsightKind(Enum):
    """Severity of a governance finding."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


@dataclass(frozen=True)
class Insight:
    """One governance finding."""
    kind: InsightKind
    title: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "title": self.title, "message": self.message}


@dataclass(frozen=True)
class InsightResult:
    """Findings in rule order plus the ghost counts shown in the risk view."""
    insights: tuple[Insight, ...]
    ghost_field_count: int = 0
    ghost_reference_count: int = 0

    @property
    def has_critical(self) -> bool:
        return any(i.kind is InsightKind.CRITICAL for i in self.insights)

    def to_dict(self) -> dict[str, Any]:
        return {
            "insights": [i.to_dict() for i in self.insights],
            "ghost_field_count": self.ghost_field_count,
            "ghost_reference_count": self.ghost_reference_count,
        }


@dataclass(frozen=True)
class GhostCounts:
    fields: frozenset[str] = field(default_factory=frozenset)
    references: int = 0


def count_ghost_fields(session: GovernanceSession, ids: frozenset[str] | set[str]) -> GhostCounts:
    """Distinct ghost field names and total ghost occurrences in scope."""
    names = set()
    occurrences = 0
    for ref in ghost_references(session, ids):
        names.add(ref.field_name)
        occurrences += 1
    return GhostCounts(fields=frozenset(names), references=occurrences)


# ==================== RULES ====================


def ghost_field_rule(session: GovernanceSession, ids: frozenset[str] | set[str], today: date) -> Insight | None:
    ghosts = count_ghost_fields(session, ids)
    if not ghosts.fields:
        return None
    return Insight(
        InsightKind.CRITICAL,
        "Ghost Fields Detected",
        f"{len(ghosts.fields)} fields are referenced but not in catalog. This can cause runtime errors.",
    )


def catalog_utilization_rule(
    session: GovernanceSession, ids: frozenset[str] | set[str], today: date
) -> Insight | None:
    """Warn below the low threshold, praise above the high one, stay silent in between."""
    if session.catalog_size == 0:
        return None
    saturation = compute_saturation(session, ids)
    if saturation < LOW_UTILIZATION_THRESHOLD:
        return Insight(
            InsightKind.WARNING,
            "Low Catalog Utilization",
            f"Only {saturation:.1f}% of catalog fields are in use. Consider cleaning unused fields.",
        )
    if saturation > HIGH_UTILIZATION_THRESHOLD:
        return Insight(
            InsightKind.SUCCESS,
            "High Catalog Utilization",
            f"{saturation:.1f}% of catalog fields are actively used. Great efficiency!",
        )
    return None


def most_referenced_field(session: GovernanceSession, ids: frozenset[str] | set[str]) -> tuple[str, int] | None:
    """Most referenced in-scope field.

    Ties go to the field seen first in the reference table: a later field
    only wins with a strictly greater count.
    """
    top_field = None
    top_count = 0
    for name, count in count_by_field(usage_references(session, ids)).items():
        if count > top_count:
            top_field, top_count = name, count
    if top_field is None:
        return None
    return top_field, top_count


def critical_dependency_rule(
    session: GovernanceSession, ids: frozenset[str] | set[str], today: date
) -> Insight | None:
    top = most_referenced_field(session, ids)
    if top is None:
        return None
    name, count = top
    return Insight(
        InsightKind.INFO,
        "Critical Dependency",
        f"Field '{name}' is used in {count} locations. Changes require careful review.",
    )


def stale_asset_rule(session: GovernanceSession, ids: frozenset[str] | set[str], today: date) -> Insight | None:
    cutoff = today - timedelta(days=STALE_ASSET_DAYS)
    stale = sum(1 for asset in in_scope_assets(session, ids) if asset.active_day < cutoff)
    if not stale:
        return None
    return Insight(
        InsightKind.WARNING,
        "Stale Assets",
        f"{stale} assets haven't been active in {STALE_ASSET_DAYS}+ days. Review for deprecation.",
    )


InsightRule = Callable[[GovernanceSession, frozenset[str] | set[str], date], Insight | None]

INSIGHT_RULES: tuple[InsightRule, ...] = (
    ghost_field_rule,
    catalog_utilization_rule,
    critical_dependency_rule,
    stale_asset_rule,
)

ALL_CLEAR = Insight(InsightKind.SUCCESS, "All Systems Operational", "No critical governance issues detected.")


def compute_insights(
    session: GovernanceSession,
    ids: frozenset[str] | set[str],
    today: date | datetime | None = None,
    rules: tuple[InsightRule, ...] = INSIGHT_RULES,
) -> InsightResult:
    """Evaluate every rule in order and collect the findings.

    Args:
        session: Loaded dataset
        ids: In-scope asset ids
        today: Reference day for staleness (defaults to the current day)
        rules: Ordered rule functions

    Returns:
        InsightResult with at least one insight
    """
    day = to_day(today if today is not None else datetime.now())
    insights = []
    for rule in rules:
        insight = rule(session, ids, day)
        if insight is not None:
            insights.append(insight)
    if not insights:
        insights.append(ALL_CLEAR)

    ghosts = count_ghost_fields(session, ids)
    return InsightResult(
        insights=tuple(insights),
        ghost_field_count=len(ghosts.fields),
        ghost_reference_count=ghosts.references,
    )
