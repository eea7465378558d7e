"""
Source and derived record types.

This module contains the dataclasses for the four source tables, the
refresh metadata record and the denormalized reference row that every
aggregation runs over. All records are immutable once loaded.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from catalog_governance.core.constants import ASSET_TYPE_UNKNOWN, TRACKED_ASSET_TYPES


@dataclass(frozen=True)
class CatalogField:
    """One field of the catalog schema.

    Attributes:
        field_name: Unique field key
        field_type: Declared field type (free text from the source)
        is_custom: Whether the field is a custom attribute
        last_seen: Raw last-seen value, empty when absent
    """

    field_name: str
    field_type: str = ""
    is_custom: bool = False
    last_seen: str = ""


@dataclass(frozen=True)
class Asset:
    """A campaign, canvas or other content asset.

    Attributes:
        asset_id: Unique asset key
        asset_name: Display name
        asset_type: "Campaign", "Canvas" or another raw value
        subtype: Source-specific subtype
        status: Source-specific status
        last_edited: Last edit timestamp (naive local time) or None
        last_active: Last activity timestamp (naive local time) or None
        tags: Raw tag string
    """

    asset_id: str
    asset_name: str = ""
    asset_type: str = ""
    subtype: str = ""
    status: str = ""
    last_edited: datetime | None = None
    last_active: datetime | None = None
    tags: str = ""

    @property
    def active_day(self) -> date | None:
        """Calendar day of last activity, with time-of-day discarded."""
        if self.last_active is None:
            return None
        return self.last_active.date()

    @property
    def type_bucket(self) -> str:
        """Asset type used for grouping; blank types group as Unknown."""
        return self.asset_type or ASSET_TYPE_UNKNOWN


@dataclass(frozen=True)
class FieldReference:
    """One textual occurrence of a field token inside a content block.

    ``is_risk`` holds the raw flag from the source table; it is normalized
    to a bool when the reference is joined.
    """

    ref_id: str
    block_id: str
    field_name: str
    match_type: str = ""
    context_snippet: str = ""
    is_risk: Any = ""


@dataclass(frozen=True)
class JoinedReference:
    """Field reference resolved to its owning asset.

    Attributes:
        asset_id: Owning asset, or None when the block is not indexed
        asset_type: Owning asset's type, empty when unresolved or unknown asset
        asset_name: Owning asset's name, empty when unresolved or unknown asset
        is_risk: True for ghost-field references (field absent from catalog)
    """

    ref_id: str
    block_id: str
    field_name: str
    match_type: str
    context_snippet: str
    is_risk: bool
    asset_id: str | None
    asset_type: str = ""
    asset_name: str = ""

    @property
    def is_resolved(self) -> bool:
        return bool(self.asset_id)

    @property
    def is_tracked_type(self) -> bool:
        """Whether the owning asset is a Campaign or a Canvas."""
        return self.asset_type in TRACKED_ASSET_TYPES


@dataclass(frozen=True)
class Dependency:
    """Asset-to-asset dependency. Stored for completeness, never aggregated."""

    source_asset_id: str
    target_asset_id: str
    dependency_type: str = ""


@dataclass(frozen=True)
class RefreshMetadata:
    """Optional last-refresh information published next to the tables.

    Attributes:
        refreshed_at: Raw ISO timestamp string, empty when unavailable
    """

    refreshed_at: str = ""

    @property
    def available(self) -> bool:
        return bool(self.refreshed_at)
