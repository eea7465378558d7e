"""
Row parsing helpers for the source tables.

Converts raw CSV frames (all columns read as strings) into the typed records
in ``catalog_governance.data.models`` and parses the optional refresh
metadata document. Parsing is tolerant: missing columns read as empty
strings, unparsable dates become None, and rows without a key are skipped.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

from catalog_governance.core.constants import (
    REFRESH_DISPLAY_TIMEZONE,
    REFRESH_META_KEYS,
    TRUTHY_FLAG_VALUES,
)
from catalog_governance.data.models import (
    Asset,
    CatalogField,
    Dependency,
    FieldReference,
    RefreshMetadata,
)

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = ["field_name", "field_type", "is_custom", "last_seen"]
ASSET_COLUMNS = ["asset_id", "asset_name", "asset_type", "subtype", "status", "last_edited", "last_active", "tags"]
REFERENCE_COLUMNS = ["ref_id", "block_id", "field_name", "match_type", "context_snippet", "is_risk"]
DEPENDENCY_COLUMNS = ["source_asset_id", "target_asset_id", "dependency_type"]

# Time followed by "Z", "UTC" or a numeric offset such as +02:00
_OFFSET_SUFFIX = r"\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?\s*(?:Z|UTC|GMT|[+-]\d{2}:?\d{2})$"


# ==================== SCALAR PARSING ====================


def parse_bool(value: Any) -> bool:
    """Tolerant boolean parse: "true", "1" and "yes" (any case) are True."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    try:
        if pd.isna(value):
            return False
    except (TypeError, ValueError):
        pass
    return str(value).strip().lower() in TRUTHY_FLAG_VALUES


def parse_date_column(values: pd.Series) -> list[datetime | None]:
    """Parse a column of date strings into naive local datetimes (None when invalid).

    Values carrying a UTC offset (or "Z") are converted to the local timezone
    so their calendar day matches the local "today" used by period filters.
    Naive values are kept as written.
    """
    if values.empty:
        return []
    text = values.astype(str).str.strip()
    has_offset = text.str.contains(_OFFSET_SUFFIX, flags=re.IGNORECASE, regex=True, na=False)
    parsed = pd.to_datetime(values, errors="coerce", utc=True, format="mixed")
    result: list[datetime | None] = []
    for moment, aware in zip(parsed, has_offset):
        if pd.isna(moment):
            result.append(None)
        elif aware:
            result.append(moment.to_pydatetime().astimezone().replace(tzinfo=None))
        else:
            result.append(moment.tz_convert(None).to_pydatetime())
    return result


def parse_date(value: Any) -> datetime | None:
    """Parse a single date value with the same rules as ``parse_date_column``."""
    if value is None or value == "":
        return None
    return parse_date_column(pd.Series([value], dtype=object))[0]


# ==================== FRAME NORMALIZATION ====================


def _normalize_frame(frame: pd.DataFrame, columns: list[str], table: str) -> pd.DataFrame:
    """Project a raw frame onto the expected columns, filling gaps with ""."""
    missing = [c for c in columns if c not in frame.columns]
    if missing and not frame.empty:
        logger.warning(f"Table {table} is missing columns {', '.join(missing)}; treating them as empty")
    normalized = frame.reindex(columns=columns).fillna("")
    return normalized.astype(str)


def _drop_blank_keys(frame: pd.DataFrame, key: str, table: str) -> pd.DataFrame:
    frame = frame.assign(**{key: frame[key].str.strip()})
    blank = frame[key] == ""
    if blank.any():
        logger.warning(f"Skipped {int(blank.sum())} row(s) without {key} in {table}")
    return frame[~blank]


def _keep_last_duplicate(frame: pd.DataFrame, key: str, table: str) -> pd.DataFrame:
    duplicated = frame.duplicated(subset=[key], keep="last")
    if duplicated.any():
        logger.warning(f"Dropped {int(duplicated.sum())} duplicate {key} row(s) in {table} (last row wins)")
    return frame[~duplicated]


# ==================== TABLE CONVERTERS ====================


def catalog_from_frame(frame: pd.DataFrame, table: str = "catalog") -> list[CatalogField]:
    """Convert a catalog schema frame into CatalogField records (unique by field_name)."""
    rows = _normalize_frame(frame, CATALOG_COLUMNS, table)
    rows = _keep_last_duplicate(_drop_blank_keys(rows, "field_name", table), "field_name", table)
    return [
        CatalogField(
            field_name=r["field_name"],
            field_type=r["field_type"],
            is_custom=parse_bool(r["is_custom"]),
            last_seen=r["last_seen"],
        )
        for r in rows.to_dict("records")
    ]


def assets_from_frame(frame: pd.DataFrame, table: str = "assets") -> list[Asset]:
    """Convert an asset inventory frame into Asset records (unique by asset_id)."""
    rows = _normalize_frame(frame, ASSET_COLUMNS, table)
    rows = _keep_last_duplicate(_drop_blank_keys(rows, "asset_id", table), "asset_id", table)
    last_edited = parse_date_column(rows["last_edited"])
    last_active = parse_date_column(rows["last_active"])
    return [
        Asset(
            asset_id=r["asset_id"],
            asset_name=r["asset_name"],
            asset_type=r["asset_type"],
            subtype=r["subtype"],
            status=r["status"],
            last_edited=edited,
            last_active=active,
            tags=r["tags"],
        )
        for r, edited, active in zip(rows.to_dict("records"), last_edited, last_active, strict=True)
    ]


def references_from_frame(frame: pd.DataFrame, table: str = "field_references") -> list[FieldReference]:
    """Convert a field reference frame into raw FieldReference records.

    Every row is kept; resolution and risk normalization happen at join time.
    """
    rows = _normalize_frame(frame, REFERENCE_COLUMNS, table)
    return [
        FieldReference(
            ref_id=r["ref_id"],
            block_id=r["block_id"].strip(),
            field_name=r["field_name"],
            match_type=r["match_type"],
            context_snippet=r["context_snippet"],
            is_risk=r["is_risk"],
        )
        for r in rows.to_dict("records")
    ]


def dependencies_from_frame(frame: pd.DataFrame, table: str = "dependencies") -> list[Dependency]:
    """Convert a dependency frame into Dependency records."""
    rows = _normalize_frame(frame, DEPENDENCY_COLUMNS, table)
    return [
        Dependency(
            source_asset_id=r["source_asset_id"],
            target_asset_id=r["target_asset_id"],
            dependency_type=r["dependency_type"],
        )
        for r in rows.to_dict("records")
    ]


# ==================== REFRESH METADATA ====================


def parse_refresh_metadata(text: str) -> RefreshMetadata:
    """Extract the refresh timestamp from a metadata JSON document.

    Invalid JSON or a missing key yields an empty RefreshMetadata.
    """
    try:
        meta = json.loads(text or "{}")
    except json.JSONDecodeError:
        return RefreshMetadata()
    if not isinstance(meta, dict):
        return RefreshMetadata()
    for key in REFRESH_META_KEYS:
        value = meta.get(key)
        if value:
            return RefreshMetadata(refreshed_at=str(value))
    return RefreshMetadata()


def format_refresh_caption(refresh: RefreshMetadata, tz_name: str = REFRESH_DISPLAY_TIMEZONE) -> str:
    """Format the last-refresh caption.

    Returns "" without metadata, a Pacific-time caption when the timestamp
    parses, or the raw value labeled UTC otherwise.
    """
    if not refresh.available:
        return ""
    raw = refresh.refreshed_at
    try:
        moment = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        local = moment.astimezone(ZoneInfo(tz_name))
    except (ValueError, ZoneInfoNotFoundError):
        return f"Last refresh (UTC): {raw}"

    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    stamp = f"{local:%b %d, %Y}, {hour}:{local:%M:%S} {meridiem} {local.tzname()}"
    return f"Last refresh (Pacific): {stamp}"
