"""
Loaded dataset context.

A ``GovernanceSession`` holds the loaded tables, the block index and the
joined reference table. It is created once after a successful load and
passed explicitly to every query function; nothing mutates it afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType

from catalog_governance.data.denormalize import denormalize_references
from catalog_governance.data.models import (
    Asset,
    CatalogField,
    Dependency,
    FieldReference,
    JoinedReference,
    RefreshMetadata,
)


@dataclass(frozen=True)
class GovernanceSession:
    """Immutable, session-scoped view of the loaded governance dataset.

    Attributes:
        catalog: Catalog schema fields
        assets: Asset inventory
        references: Raw field references, in source order
        dependencies: Asset dependencies (stored only)
        block_index: Read-only block_id -> asset_id mapping
        joined: Joined references, one per raw reference, in source order
        assets_by_id: Read-only asset lookup
        catalog_field_names: Set of catalog field names
        refresh: Refresh metadata published with the tables
        source: Location the tables were loaded from
        loaded_at: When the session was created (UTC)
    """

    catalog: tuple[CatalogField, ...]
    assets: tuple[Asset, ...]
    references: tuple[FieldReference, ...]
    dependencies: tuple[Dependency, ...]
    block_index: Mapping[str, str]
    joined: tuple[JoinedReference, ...]
    assets_by_id: Mapping[str, Asset]
    catalog_field_names: frozenset[str]
    refresh: RefreshMetadata = field(default_factory=RefreshMetadata)
    source: str = ""
    loaded_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_tables(
        cls,
        catalog: Iterable[CatalogField],
        assets: Iterable[Asset],
        references: Iterable[FieldReference],
        dependencies: Iterable[Dependency] = (),
        block_index: Mapping[str, str] | None = None,
        refresh: RefreshMetadata | None = None,
        source: str = "",
    ) -> GovernanceSession:
        """Build a session from loaded tables, computing the join once."""
        catalog = tuple(catalog)
        assets = tuple(assets)
        references = tuple(references)
        index = MappingProxyType(dict(block_index or {}))
        assets_by_id = MappingProxyType({a.asset_id: a for a in assets})
        return cls(
            catalog=catalog,
            assets=assets,
            references=references,
            dependencies=tuple(dependencies),
            block_index=index,
            joined=tuple(denormalize_references(references, index, assets_by_id)),
            assets_by_id=assets_by_id,
            catalog_field_names=frozenset(f.field_name for f in catalog),
            refresh=refresh or RefreshMetadata(),
            source=source,
        )

    @property
    def catalog_size(self) -> int:
        return len(self.catalog)

    @property
    def unresolved_reference_count(self) -> int:
        """References whose block has no index entry."""
        return sum(1 for ref in self.joined if not ref.is_resolved)

    def dataset_counts(self) -> dict[str, int]:
        """Row counts per loaded table, for report headers."""
        return {
            "catalog_fields": len(self.catalog),
            "assets": len(self.assets),
            "references": len(self.references),
            "unresolved_references": self.unresolved_reference_count,
            "dependencies": len(self.dependencies),
            "indexed_blocks": len(self.block_index),
        }
