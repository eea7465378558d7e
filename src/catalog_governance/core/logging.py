"""Logging helpers for the catalog governance engine."""

import atexit
import contextlib
import json
import logging
import os
import re
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from catalog_governance.core.constants import LOG_FILE_BACKUP_COUNT, LOG_FILE_MAX_BYTES

LOGGER_NAME = "catalog_governance"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_LOG_RECORD_RESERVED_FIELDS = set(logging.makeLogRecord({}).__dict__.keys()) | {"message", "asctime"}
_REDACTED_VALUE = "[REDACTED]"

# Data URLs may embed access tokens as query parameters or basic-auth credentials
_SENSITIVE_KEY_REGEX = r"access[_-]?token|api[_-]?key|apikey|token|secret|password|sig|signature"
_SENSITIVE_QUERY_PATTERN = re.compile(rf"(?i)([?&](?:{_SENSITIVE_KEY_REGEX})=)([^&#\s]+)")
_SENSITIVE_KEY_VALUE_PATTERN = re.compile(
    rf"""(?ix)
    (?P<key>(?<![A-Za-z0-9_])(?:{_SENSITIVE_KEY_REGEX})(?![A-Za-z0-9_]))
    (?P<separator>\s*[:=]\s*)
    (?P<value>"[^"]*"|'[^']*'|[^,\s;&}}\[\]]+)
    """
)
_URL_CREDENTIALS_PATTERN = re.compile(r"(?i)(https?://)[^/\s:@]+:[^/\s@]+@")
_BEARER_PATTERN = re.compile(r"(?i)\b(bearer)\s+([A-Za-z0-9._~+/=-]+)")


def _safe_record_message(record: logging.LogRecord) -> str:
    try:
        return record.getMessage()
    except Exception:
        return f"{record.msg!s} [log-message-format-error]"


def _redact_key_value(match: re.Match[str]) -> str:
    value = match.group("value")
    if len(value) >= 2 and value[0] in {"'", '"'} and value[-1] == value[0]:
        redacted = f"{value[0]}{_REDACTED_VALUE}{value[0]}"
    else:
        redacted = _REDACTED_VALUE
    return f"{match.group('key')}{match.group('separator')}{redacted}"


def redact_message(message: str) -> str:
    """Mask tokens, URL credentials and bearer values in a log message."""
    redacted = _SENSITIVE_QUERY_PATTERN.sub(rf"\1{_REDACTED_VALUE}", message)
    redacted = _URL_CREDENTIALS_PATTERN.sub(rf"\1{_REDACTED_VALUE}@", redacted)
    redacted = _SENSITIVE_KEY_VALUE_PATTERN.sub(_redact_key_value, redacted)
    return _BEARER_PATTERN.sub(rf"\1 {_REDACTED_VALUE}", redacted)


class SensitiveDataFilter(logging.Filter):
    """Best-effort redaction for sensitive values in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_message(_safe_record_message(record))
        record.args = ()
        return True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging output.

    Produces JSON lines suitable for log aggregation systems.
    Each log record is a single JSON object on one line.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_message(_safe_record_message(record)),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Context fields attached via with_log_context() or logging's `extra`
        for key, value in record.__dict__.items():
            if key in _LOG_RECORD_RESERVED_FIELDS or key.startswith("_"):
                continue
            log_entry.setdefault(key, redact_message(value) if isinstance(value, str) else value)

        return json.dumps(log_entry, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges contextual fields into record extras."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        merged_extra = dict(self.extra)
        extra = kwargs.get("extra")
        if isinstance(extra, dict):
            merged_extra.update(extra)
        kwargs["extra"] = merged_extra
        return msg, kwargs


def with_log_context(
    logger: logging.Logger | logging.LoggerAdapter, **context: object
) -> logging.Logger | logging.LoggerAdapter:
    """Return a logger enriched with persistent contextual fields."""
    base_logger = logger
    existing_context: dict[str, object] = {}
    if isinstance(logger, logging.LoggerAdapter):
        existing_context = dict(logger.extra or {})
        base_logger = logger.logger
    if not isinstance(base_logger, logging.Logger):
        return logger

    existing_context.update({k: v for k, v in context.items() if v is not None})
    return ContextLoggerAdapter(base_logger, existing_context)


_atexit_registered = False


def setup_logging(
    log_level: str | None = None,
    log_format: str = "text",
    log_dir: str | Path | None = "logs",
    max_bytes: int = LOG_FILE_MAX_BYTES,
    backup_count: int = LOG_FILE_BACKUP_COUNT,
) -> logging.Logger:
    """Setup logging to both file and console.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format - "text" (default) or "json" for structured logging
        log_dir: Directory for rotating log files, or None for console only
        max_bytes: Size at which the log file rotates
        backup_count: Number of rotated log files kept

    Returns:
        Configured package logger

    Priority: 1) Passed parameter, 2) Environment variable LOG_LEVEL, 3) Default INFO
    """
    global _atexit_registered

    if not _atexit_registered:
        atexit.register(logging.shutdown)
        _atexit_registered = True

    log_file = None
    if log_dir is not None:
        try:
            Path(log_dir).mkdir(exist_ok=True)
            timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
            log_file = Path(log_dir) / f"governance_report_{timestamp}.log"
        except OSError as e:
            print(f"Warning: Cannot create logs directory: {e}. Logging to console only.", file=sys.stderr)

    if log_level is None:
        log_level = os.environ.get("LOG_LEVEL", "INFO")
    if log_level.upper() not in VALID_LOG_LEVELS:
        print(f"Warning: Invalid log level '{log_level}', using INFO", file=sys.stderr)
        log_level = "INFO"
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)

    # Console logs go to stderr so report output on stdout stays pipeable
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count))

    if log_format.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        handler.addFilter(SensitiveDataFilter())
        logging.root.addHandler(handler)
    logging.root.setLevel(numeric_level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)

    if log_file is not None:
        logger.debug(f"Logging initialized. Log file: {log_file}")
    else:
        logger.debug("Logging initialized. Console output only.")

    for handler in logging.root.handlers:
        with contextlib.suppress(Exception):
            handler.flush()

    return logger
