# src/lumin/utils_logs.py
"""Diagnostics for lumin.

Everything here writes to stderr. stdout belongs to the generated program
so that `lumin main.lua > out.lua` never mixes the two.
"""

import logging
import sys
from collections.abc import Callable
from typing import Any, TextIO, cast

from .meta import PROGRAM_PACKAGE
from .runtime import current_runtime
from .utils import safe_log


# --- ANSI Colors -------------------------------------------------------------


RESET = "\033[0m"
CYAN = "\033[36m"
YELLOW = "\033[93m"
RED = "\033[91m"
GRAY = "\033[90m"


# --- Levels ------------------------------------------------------------------


TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1

LEVEL_ORDER = [
    "trace",
    "debug",
    "info",
    "warning",
    "error",
    "critical",
    "silent",
]

_LEVEL_VALUES = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "silent": SILENT_LEVEL,
}

# levelname → (color, tag); info carries no tag
TAG_STYLES = {
    "TRACE": (GRAY, "[TRACE]"),
    "DEBUG": (CYAN, "[DEBUG]"),
    "WARNING": (YELLOW, "⚠️ "),
    "ERROR": (RED, "❌ "),
    "CRITICAL": (RED, "💥 "),
}


class LoggerWithTrace(logging.Logger):
    """Logger with a `trace()` method below DEBUG."""

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)


logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.setLoggerClass(LoggerWithTrace)


# --- Formatting and output ---------------------------------------------------


def colorize(text: str, color: str, *, use_color: bool | None = None) -> str:
    if use_color is None:
        use_color = current_runtime["use_color"]
    return f"{color}{text}{RESET}" if use_color else text


class TagFormatter(logging.Formatter):
    """Prefix records with their level tag, colored when enabled."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        style = TAG_STYLES.get(record.levelname)
        if style is None:
            return text
        color, tag = style
        return f"{colorize(tag, color)} {text}"


class DiagnosticStreamHandler(logging.StreamHandler[TextIO]):
    """Write every record to the current `sys.stderr`."""

    def __init__(self) -> None:
        super().__init__(stream=sys.stderr)

    def emit(self, record: logging.LogRecord) -> None:
        # stderr may have been swapped since construction (pytest, redirection)
        self.stream = sys.stderr
        super().emit(record)


# --- Logger access -----------------------------------------------------------


_logger = cast("LoggerWithTrace", logging.getLogger(PROGRAM_PACKAGE))
_configured = False


def _sync_level() -> None:
    name = str(current_runtime.get("log_level") or "").lower()
    level = _LEVEL_VALUES.get(name)
    if level is None:
        safe_log(f"[LOGGER ERROR] ❌ Unknown log level: {name!r}; using info")
        level = logging.INFO
    _logger.setLevel(level)


def get_logger() -> LoggerWithTrace:
    """Return the lumin logger, level synced to the runtime setting."""
    global _configured  # noqa: PLW0603
    if not _configured:
        handler = DiagnosticStreamHandler()
        handler.setFormatter(TagFormatter("%(message)s"))
        _logger.addHandler(handler)
        _logger.propagate = False
        _configured = True
    _sync_level()
    return _logger


def set_log_level(level: str) -> None:
    current_runtime["log_level"] = level
    get_logger()


# --- Progress ----------------------------------------------------------------


def progress_reporter(label: str) -> Callable[[int], None]:
    """Return a callback that rewrites a `label... N%` line on stderr.

    Progress is not a log record: it ignores the log level and is only
    produced when the caller asked for it.
    """

    def report(percent: int) -> None:
        end = "\n" if percent >= 100 else ""  # noqa: PLR2004
        sys.stderr.write(f"\r{label}... {percent}%{end}")
        sys.stderr.flush()

    return report


def progress_tick(symbol: str = ".") -> None:
    """Write a single progress mark (one per processed file)."""
    sys.stderr.write(symbol)
    sys.stderr.flush()


def progress_line(label: str) -> None:
    """Write a `label...` stage heading."""
    progress_tick(f"{label}...\n")
