"""Data layer - source records, parsing, table access, block index and join."""

from catalog_governance.data.block_index import BlockIndexBuilder, build_block_index
from catalog_governance.data.denormalize import denormalize_references, join_reference
from catalog_governance.data.models import (
    Asset,
    CatalogField,
    Dependency,
    FieldReference,
    JoinedReference,
    RefreshMetadata,
)
from catalog_governance.data.parsing import (
    format_refresh_caption,
    parse_bool,
    parse_date,
    parse_refresh_metadata,
)
from catalog_governance.data.sources import (
    HttpTableSource,
    LocalTableSource,
    TableSource,
    make_source,
)

__all__ = [
    # Models
    "Asset",
    "CatalogField",
    "Dependency",
    "FieldReference",
    "JoinedReference",
    "RefreshMetadata",
    # Parsing
    "format_refresh_caption",
    "parse_bool",
    "parse_date",
    "parse_refresh_metadata",
    # Sources
    "HttpTableSource",
    "LocalTableSource",
    "TableSource",
    "make_source",
    # Index & join
    "BlockIndexBuilder",
    "build_block_index",
    "denormalize_references",
    "join_reference",
]
