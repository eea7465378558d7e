"""
Activity filtering.

The in-scope asset id set is the single predicate every aggregation
applies: a joined reference is in scope iff it resolved to an asset and
that asset is in the set.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
from datetime import date, datetime

from catalog_governance.analytics.periods import resolve_period
from catalog_governance.core.constants import SENTINEL_FIELD_NAME
from catalog_governance.data.models import Asset, JoinedReference
from catalog_governance.session import GovernanceSession


def get_in_scope_asset_ids(
    session: GovernanceSession, period: str, now: date | datetime | None = None
) -> frozenset[str]:
    """Return ids of assets active within ``period``.

    Assets without ``last_active`` are never in scope, even for All Time.
    """
    date_range = resolve_period(period, now)
    ids = set()
    for asset in session.assets:
        day = asset.active_day
        if day is None:
            continue
        if date_range is None or day in date_range:
            ids.add(asset.asset_id)
    return frozenset(ids)


def in_scope_assets(session: GovernanceSession, ids: frozenset[str] | set[str]) -> Iterator[Asset]:
    """In-scope assets with activity, in inventory order."""
    return (a for a in session.assets if a.asset_id in ids and a.last_active is not None)


def in_scope_references(session: GovernanceSession, ids: frozenset[str] | set[str]) -> Iterator[JoinedReference]:
    """Resolved references whose asset is in scope, in source order."""
    return (r for r in session.joined if r.asset_id is not None and r.asset_id in ids)


def usage_references(session: GovernanceSession, ids: frozenset[str] | set[str]) -> Iterator[JoinedReference]:
    """In-scope references to catalog fields (not risk-flagged)."""
    return (r for r in in_scope_references(session, ids) if not r.is_risk)


def ghost_references(session: GovernanceSession, ids: frozenset[str] | set[str]) -> Iterator[JoinedReference]:
    """In-scope risk-flagged references, excluding the known false-positive field."""
    return (r for r in in_scope_references(session, ids) if r.is_risk and r.field_name != SENTINEL_FIELD_NAME)


def count_by_field(references: Iterable[JoinedReference]) -> Counter[str]:
    """Reference count per field name, keyed in first-seen order."""
    counts: Counter[str] = Counter()
    for ref in references:
        counts[ref.field_name] += 1
    return counts


def rank_fields(counts: Counter[str]) -> list[tuple[str, int]]:
    """Fields by descending count; equal counts keep first-seen order."""
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)
