"""Join raw field references to their owning assets."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from catalog_governance.data.models import Asset, FieldReference, JoinedReference
from catalog_governance.data.parsing import parse_bool


def join_reference(
    reference: FieldReference, block_index: Mapping[str, str], assets_by_id: Mapping[str, Asset]
) -> JoinedReference:
    """Resolve one reference through the block index and the asset table."""
    asset_id = block_index.get(reference.block_id) or None
    asset = assets_by_id.get(asset_id) if asset_id else None
    return JoinedReference(
        ref_id=reference.ref_id,
        block_id=reference.block_id,
        field_name=reference.field_name,
        match_type=reference.match_type,
        context_snippet=reference.context_snippet,
        is_risk=parse_bool(reference.is_risk),
        asset_id=asset_id,
        asset_type=asset.asset_type if asset else "",
        asset_name=asset.asset_name if asset else "",
    )


def denormalize_references(
    references: Iterable[FieldReference],
    block_index: Mapping[str, str],
    assets_by_id: Mapping[str, Asset],
) -> list[JoinedReference]:
    """Join every reference; the output has exactly one row per input row.

    Unresolved references keep ``asset_id=None`` so each consumer decides
    whether to include them.
    """
    return [join_reference(ref, block_index, assets_by_id) for ref in references]
