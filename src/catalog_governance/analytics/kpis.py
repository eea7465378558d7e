"""KPI aggregation over the in-scope asset set."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from catalog_governance.analytics.scope import in_scope_assets, usage_references
from catalog_governance.core.constants import ASSET_TYPE_CAMPAIGN, ASSET_TYPE_CANVAS
from catalog_governance.session import GovernanceSession


@dataclass(frozen=True)
class KpiSummary:
    """Headline numbers for one period.

    Attributes:
        campaigns: In-scope assets of type Campaign
        canvases: In-scope assets of type Canvas
        saturation_percent: Share of catalog fields referenced by in-scope content
        catalog_field_count: Total catalog fields
        used_field_count: Distinct catalog fields referenced in scope
    """

    campaigns: int
    canvases: int
    saturation_percent: float
    catalog_field_count: int
    used_field_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def used_field_names(session: GovernanceSession, ids: frozenset[str] | set[str]) -> set[str]:
    """Distinct field names of in-scope, non-risk references."""
    return {ref.field_name for ref in usage_references(session, ids)}


def saturation_percent(used_count: int, catalog_size: int) -> float:
    """Percentage of catalog fields in use; 0.0 when the catalog is empty.

    Capped at 100 for tables whose risk flags disagree with the catalog.
    """
    if catalog_size <= 0:
        return 0.0
    return min(used_count * 100 / catalog_size, 100.0)


def compute_saturation(session: GovernanceSession, ids: frozenset[str] | set[str]) -> float:
    return saturation_percent(len(used_field_names(session, ids)), session.catalog_size)


def compute_kpis(session: GovernanceSession, ids: frozenset[str] | set[str]) -> KpiSummary:
    """Compute campaign/canvas counts and catalog saturation for the in-scope set."""
    campaigns = 0
    canvases = 0
    for asset in in_scope_assets(session, ids):
        if asset.asset_type == ASSET_TYPE_CAMPAIGN:
            campaigns += 1
        elif asset.asset_type == ASSET_TYPE_CANVAS:
            canvases += 1

    used = used_field_names(session, ids)
    return KpiSummary(
        campaigns=campaigns,
        canvases=canvases,
        saturation_percent=saturation_percent(len(used), session.catalog_size),
        catalog_field_count=session.catalog_size,
        used_field_count=len(used),
    )
