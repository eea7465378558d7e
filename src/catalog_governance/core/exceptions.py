"""Custom exceptions for the catalog governance engine.

All exception classes carry a human-readable message plus optional context
so the CLI boundary can print a single actionable line.
"""


class GovernanceError(Exception):
    """Base exception for all catalog governance errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(GovernanceError):
    """Exception raised for configuration-related errors.

    Examples:
        - Config file not found
        - Invalid JSON in config file
        - Wrong value type for a known setting
        - Neither a data URL nor a data directory configured
    """

    def __init__(
        self, message: str, config_file: str | None = None, field: str | None = None, details: str | None = None
    ):
        self.config_file = config_file
        self.field = field
        super().__init__(message, details)


class DataLoadError(GovernanceError):
    """Fatal failure while loading a required table or the block index.

    Wraps HTTP status failures, network errors, missing local files and
    unreadable CSV content. A session is never created once this is raised.
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        status_code: int | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.source = source
        self.status_code = status_code
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"HTTP {self.status_code}")
        if self.source:
            parts.append(self.source)
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class PeriodError(GovernanceError):
    """Raised when an activity period label is not recognized."""

    def __init__(self, period: str, details: str | None = None):
        self.period = period
        super().__init__(f"Unknown activity period '{period}'", details)


class OutputError(GovernanceError):
    """Exception raised for report writing failures.

    Examples:
        - Permission denied
        - Disk full
        - Invalid path
    """

    def __init__(
        self,
        message: str,
        output_path: str | None = None,
        output_format: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.output_path = output_path
        self.output_format = output_format
        self.original_error = original_error
        super().__init__(message, details)
