"""Core module - Foundation components with no internal dependencies.

This module provides the basic building blocks used throughout the application:
- Version information
- Custom exceptions
- Configuration dataclasses
- Constants and defaults
- Logging and console formatting utilities
"""

from catalog_governance.core.version import __version__

from catalog_governance.core.exceptions import (
    GovernanceError,
    ConfigurationError,
    DataLoadError,
    PeriodError,
    OutputError,
)

from catalog_governance.core.config import (
    SourceConfig,
    LogConfig,
    ReportConfig,
    GovernanceConfig,
    load_config_file,
)

from catalog_governance.core.colors import ConsoleColors

from catalog_governance.core.logging import (
    JSONFormatter,
    SensitiveDataFilter,
    setup_logging,
    with_log_context,
)

from catalog_governance.core.perf import PerformanceTracker

__all__ = [
    # Version
    '__version__',
    # Exceptions
    'GovernanceError',
    'ConfigurationError',
    'DataLoadError',
    'PeriodError',
    'OutputError',
    # Config
    'SourceConfig',
    'LogConfig',
    'ReportConfig',
    'GovernanceConfig',
    'load_config_file',
    # Console / logging
    'ConsoleColors',
    'JSONFormatter',
    'SensitiveDataFilter',
    'setup_logging',
    'with_log_context',
    'PerformanceTracker',
]
