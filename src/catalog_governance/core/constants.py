"""Constants and default values for the catalog governance engine.

This module centralizes table names, period labels, insight thresholds
and other magic numbers used throughout the application.
"""

# ==================== SOURCE TABLES ====================

CATALOG_TABLE: str = "catalog_schema.csv"
ASSET_TABLE: str = "asset_inventory.csv"
REFERENCE_TABLE: str = "field_references.csv"
DEPENDENCY_TABLE: str = "dependencies.csv"
BLOCK_TABLE: str = "content_blocks.csv"  # The large one, always streamed
REFRESH_META_FILE: str = "refresh_meta.json"

# Small tables fetched in parallel before the block index is built
SMALL_TABLES: tuple[str, ...] = (CATALOG_TABLE, ASSET_TABLE, REFERENCE_TABLE, DEPENDENCY_TABLE)

# Accepted keys for the last-refresh timestamp, in priority order
REFRESH_META_KEYS: tuple[str, ...] = ("refreshed_at_utc", "refreshedAtUtc", "refreshed_at", "refreshedAt")

REFRESH_DISPLAY_TIMEZONE: str = "America/Los_Angeles"

# ==================== ASSET TYPES ====================

ASSET_TYPE_CAMPAIGN: str = "Campaign"
ASSET_TYPE_CANVAS: str = "Canvas"
ASSET_TYPE_UNKNOWN: str = "Unknown"
TRACKED_ASSET_TYPES: tuple[str, ...] = (ASSET_TYPE_CAMPAIGN, ASSET_TYPE_CANVAS)

# ==================== ACTIVITY PERIODS ====================

PERIOD_CURRENT_WEEK: str = "Current Week (Mon-Today)"
PERIOD_LAST_WEEK: str = "Last Week (Mon-Sun)"
PERIOD_LAST_30_DAYS: str = "Last 30 Days"
PERIOD_LAST_60_DAYS: str = "Last 60 Days"
PERIOD_LAST_90_DAYS: str = "Last 90 Days"
PERIOD_LAST_180_DAYS: str = "Last 180 Days"
PERIOD_YEAR_TO_DATE: str = "Year to Date (YTD)"
PERIOD_LAST_12_MONTHS: str = "Last 12 Months"
PERIOD_ALL_TIME: str = "All Time"

PERIODS: tuple[str, ...] = (
    PERIOD_CURRENT_WEEK,
    PERIOD_LAST_WEEK,
    PERIOD_LAST_30_DAYS,
    PERIOD_LAST_60_DAYS,
    PERIOD_LAST_90_DAYS,
    PERIOD_LAST_180_DAYS,
    PERIOD_YEAR_TO_DATE,
    PERIOD_LAST_12_MONTHS,
    PERIOD_ALL_TIME,
)

# Day counts for the rolling "Last N Days" periods
ROLLING_PERIOD_DAYS: dict[str, int] = {
    PERIOD_LAST_30_DAYS: 30,
    PERIOD_LAST_60_DAYS: 60,
    PERIOD_LAST_90_DAYS: 90,
    PERIOD_LAST_180_DAYS: 180,
}

DEFAULT_PERIOD: str = PERIOD_ALL_TIME

# ==================== GOVERNANCE THRESHOLDS ====================

# Known non-actionable false positive, excluded from every risk computation
SENTINEL_FIELD_NAME: str = "location_guid"

LOW_UTILIZATION_THRESHOLD: float = 30.0  # saturation < 30% -> warning
HIGH_UTILIZATION_THRESHOLD: float = 85.0  # saturation > 85% -> success
STALE_ASSET_DAYS: int = 90
PARETO_THRESHOLD_PERCENT: float = 80.0

# ==================== RANKING LIMITS ====================

DEFAULT_TOP_FIELDS: int = 15
CROSS_TAB_FIELD_LIMIT: int = 20
FIELD_IMPACT_LIMIT: int = 50

# ==================== LOADING ====================

DEFAULT_BLOCK_CHUNK_SIZE: int = 5000  # Rows per chunk when streaming the block table
BLOCK_PROGRESS_INTERVAL: int = 2000  # Log progress every N block rows
DEFAULT_FETCH_WORKERS: int = 4  # One per small table
DEFAULT_FETCH_TIMEOUT: float = 30.0
TRUTHY_FLAG_VALUES: frozenset[str] = frozenset({"true", "1", "yes"})

# ==================== DISPLAY CONSTANTS ====================

# Width of banner separator lines (used across CLI output)
BANNER_WIDTH: int = 60
REPORT_WIDTH: int = 90

# ==================== OUTPUT FORMATS ====================

OUTPUT_FORMATS: tuple[str, ...] = ("console", "json", "csv", "excel", "markdown", "all")

# ==================== LOGGING DEFAULTS ====================

LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB max per log file
LOG_FILE_BACKUP_COUNT: int = 5  # Number of backup log files to keep

# ==================== CONFIG SCHEMA ====================

# Settings accepted in a JSON config file, with their expected types
CONFIG_SCHEMA: dict[str, type | tuple[type, ...]] = {
    "data_base_url": str,
    "data_dir": str,
    "data_version": str,
    "timeout_seconds": (int, float),
    "block_chunk_size": int,
    "fetch_workers": int,
    "period": str,
    "top_n": int,
    "log_level": str,
    "log_format": str,
    "log_file_max_bytes": int,
    "log_file_backup_count": int,
}

# ==================== ENVIRONMENT VARIABLE MAPPING ====================

# Maps config setting names to environment variable names
ENV_VAR_MAPPING: dict[str, str] = {
    "data_base_url": "GOVERNANCE_DATA_URL",
    "data_dir": "GOVERNANCE_DATA_DIR",
    "data_version": "GOVERNANCE_DATA_VERSION",
    "log_level": "LOG_LEVEL",
}
