"""Console colors for governance report output.

Provides ANSI color codes for terminal output with auto-detection
of TTY support.
"""

import os
import sys


class ConsoleColors:
    """ANSI color codes for terminal output.

    Colors are disabled automatically when stdout is not a TTY, or when
    NO_COLOR is set.
    """
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    DIM = '\033[90m'
    RESET = '\033[0m'

    _enabled = sys.stdout.isatty() and not os.environ.get('NO_COLOR') and (os.name != 'nt' or os.environ.get('TERM'))

    @classmethod
    def set_enabled(cls, enabled: bool) -> None:
        cls._enabled = enabled

    @classmethod
    def is_enabled(cls) -> bool:
        return bool(cls._enabled)

    @classmethod
    def _wrap(cls, color: str, text: str) -> str:
        if cls._enabled:
            return f"{color}{text}{cls.RESET}"
        return text

    @classmethod
    def success(cls, text: str) -> str:
        """Format text as success (green)"""
        return cls._wrap(cls.GREEN, text)

    @classmethod
    def error(cls, text: str) -> str:
        """Format text as error (red)"""
        return cls._wrap(cls.RED, text)

    @classmethod
    def warning(cls, text: str) -> str:
        """Format text as warning (yellow)"""
        return cls._wrap(cls.YELLOW, text)

    @classmethod
    def info(cls, text: str) -> str:
        """Format text as info (cyan)"""
        return cls._wrap(cls.CYAN, text)

    @classmethod
    def bold(cls, text: str) -> str:
        return cls._wrap(cls.BOLD, text)

    @classmethod
    def dim(cls, text: str) -> str:
        return cls._wrap(cls.DIM, text)

    @classmethod
    def for_insight(cls, kind: str, text: str) -> str:
        """Color text by insight kind (critical, warning, info, success)."""
        formatter = {
            "critical": cls.error,
            "warning": cls.warning,
            "info": cls.info,
            "success": cls.success,
        }.get(kind)
        return formatter(text) if formatter else text
