"""Configuration dataclasses for the catalog governance engine.

These dataclasses centralize all configuration options for type safety
and easy testing. They can be created from command-line arguments, a JSON
config file and environment variables, or used directly in code.
"""

from __future__ import annotations

import argparse
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from catalog_governance.core.constants import (
    CONFIG_SCHEMA,
    DEFAULT_BLOCK_CHUNK_SIZE,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_FETCH_WORKERS,
    DEFAULT_PERIOD,
    DEFAULT_TOP_FIELDS,
    ENV_VAR_MAPPING,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
)
from catalog_governance.core.exceptions import ConfigurationError


@dataclass
class SourceConfig:
    """Where and how the source tables are loaded.

    Attributes:
        data_base_url: HTTP(S) base URL holding the CSV tables
        data_dir: Local directory holding the CSV tables (used when no URL is set)
        data_version: Cache-busting version appended to table URLs (default: refresh timestamp)
        timeout_seconds: Per-request network timeout (default: 30)
        block_chunk_size: Rows per chunk when streaming the block table (default: 5000)
        fetch_workers: Threads used to fetch the small tables (default: 4)
    """

    data_base_url: str | None = None
    data_dir: str | None = None
    data_version: str = ""
    timeout_seconds: float = DEFAULT_FETCH_TIMEOUT
    block_chunk_size: int = DEFAULT_BLOCK_CHUNK_SIZE
    fetch_workers: int = DEFAULT_FETCH_WORKERS

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_base_url": self.data_base_url,
            "data_dir": self.data_dir,
            "data_version": self.data_version,
            "timeout_seconds": self.timeout_seconds,
            "block_chunk_size": self.block_chunk_size,
            "fetch_workers": self.fetch_workers,
        }


@dataclass
class LogConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level string (default: "INFO")
        format: "text" or "json"
        file_max_bytes: Maximum size per log file (default: 10MB)
        file_backup_count: Number of backup log files (default: 5)
    """

    level: str = "INFO"
    format: str = "text"
    file_max_bytes: int = LOG_FILE_MAX_BYTES
    file_backup_count: int = LOG_FILE_BACKUP_COUNT


@dataclass
class ReportConfig:
    """Configuration for a governance report run.

    Attributes:
        period: Activity period label
        top_n: Number of fields in the top-fields ranking
        output_format: console, json, csv, excel, markdown or all
        output_path: Specific output path, or "-" for stdout
        output_dir: Directory for generated files
        quiet: Suppress non-error output
        fail_on_critical: Exit with code 2 when a critical insight is found
    """

    period: str = DEFAULT_PERIOD
    top_n: int = DEFAULT_TOP_FIELDS
    output_format: str = "console"
    output_path: str | None = None
    output_dir: str = "."
    quiet: bool = False
    fail_on_critical: bool = False


@dataclass
class GovernanceConfig:
    """Master configuration for a governance run.

    Attributes:
        source: Source table configuration
        log: Logging configuration
        report: Report configuration
    """

    source: SourceConfig = field(default_factory=SourceConfig)
    log: LogConfig = field(default_factory=LogConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    @classmethod
    def from_args(cls, args: argparse.Namespace, file_settings: dict[str, Any] | None = None) -> GovernanceConfig:
        """Create configuration from parsed arguments.

        Priority: 1) command-line flag, 2) config file, 3) environment variable, 4) default.
        """
        settings = dict(file_settings or {})

        def pick(name: str, default: Any = None) -> Any:
            value = getattr(args, name, None)
            if value is not None:
                return value
            if name in settings:
                return settings[name]
            env_name = ENV_VAR_MAPPING.get(name)
            if env_name and os.environ.get(env_name):
                return os.environ[env_name]
            return default

        return cls(
            source=SourceConfig(
                data_base_url=pick("data_base_url"),
                data_dir=pick("data_dir"),
                data_version=pick("data_version", ""),
                timeout_seconds=float(pick("timeout_seconds", DEFAULT_FETCH_TIMEOUT)),
                block_chunk_size=int(pick("block_chunk_size", DEFAULT_BLOCK_CHUNK_SIZE)),
                fetch_workers=int(pick("fetch_workers", DEFAULT_FETCH_WORKERS)),
            ),
            log=LogConfig(
                level=pick("log_level", "INFO"),
                format=pick("log_format", "text"),
                file_max_bytes=int(pick("log_file_max_bytes", LOG_FILE_MAX_BYTES)),
                file_backup_count=int(pick("log_file_backup_count", LOG_FILE_BACKUP_COUNT)),
            ),
            report=ReportConfig(
                period=pick("period", DEFAULT_PERIOD),
                top_n=int(pick("top_n", DEFAULT_TOP_FIELDS)),
                output_format=getattr(args, "format", None) or "console",
                output_path=getattr(args, "output", None),
                output_dir=getattr(args, "output_dir", None) or ".",
                quiet=bool(getattr(args, "quiet", False)),
                fail_on_critical=bool(getattr(args, "fail_on_critical", False)),
            ),
        )

    def validate(self) -> None:
        """Raise ConfigurationError when the configuration cannot drive a run."""
        if not self.source.data_base_url and not self.source.data_dir:
            raise ConfigurationError(
                "No data source configured",
                field="data_base_url",
                details="pass --data-url or --data-dir, or set GOVERNANCE_DATA_URL",
            )
        if self.source.block_chunk_size <= 0:
            raise ConfigurationError("block_chunk_size must be positive", field="block_chunk_size")
        if self.source.fetch_workers <= 0:
            raise ConfigurationError("fetch_workers must be positive", field="fetch_workers")
        if self.report.top_n <= 0:
            raise ConfigurationError("top_n must be positive", field="top_n")
        if self.report.output_path == "-" and self.report.output_format in ("csv", "excel"):
            raise ConfigurationError(
                f"{self.report.output_format} output cannot be written to stdout",
                field="output_path",
                details="use --format json or markdown with --output -",
            )


def load_config_file(config_file: str | Path) -> dict[str, Any]:
    """Load and type-check a JSON config file.

    Unknown keys are ignored so config files can be shared with other tools.

    Raises:
        ConfigurationError: If the file is missing, not valid JSON, not an object,
            or a known setting has the wrong type
    """
    path = Path(config_file)
    if not path.is_file():
        raise ConfigurationError("Config file not found", config_file=str(path))

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            "Invalid JSON in config file", config_file=str(path), details=f"line {e.lineno}: {e.msg}"
        ) from e

    if not isinstance(raw, dict):
        raise ConfigurationError("Config file must contain a JSON object", config_file=str(path))

    settings: dict[str, Any] = {}
    for name, expected_type in CONFIG_SCHEMA.items():
        if name not in raw or raw[name] is None:
            continue
        value = raw[name]
        # bool is an int subclass; never accept it for numeric settings
        if isinstance(value, bool) or not isinstance(value, expected_type):
            raise ConfigurationError(
                f"Invalid type for '{name}'",
                config_file=str(path),
                field=name,
                details=f"got {type(value).__name__}",
            )
        settings[name] = value
    return settings
