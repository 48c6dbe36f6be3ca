"""Operator-facing output helpers and logging setup."""

from __future__ import annotations

import logging
import os

from .constants import ENV_NO_COLOR

# Color codes for output
BLUE = '\033[94m'
GREEN = '\033[92m'
YELLOW = '\033[93m'
RED = '\033[91m'
RESET = '\033[0m'

# Debug output is opt-in and tied to the configured log level.
DEBUG_ENABLED = False

logger = logging.getLogger(__name__)


def set_debug_enabled(log_level: str | None) -> None:
    """Enable debug output when log_level is DEBUG (case-insensitive)."""
    global DEBUG_ENABLED
    DEBUG_ENABLED = str(log_level or '').strip().upper() == 'DEBUG'


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure logging module with specified level.
    """
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR
    }

    level = level_map.get(log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='[%(levelname)s] %(message)s',
        force=True  # Reconfigure if already configured
    )
    set_debug_enabled(log_level)
    logger.debug(f"Logging configured: {log_level.upper()}")


def _tag(label: str, color: str) -> str:
    if os.environ.get(ENV_NO_COLOR):
        return f"[{label}]"
    return f"{color}[{label}]{RESET}"


def _emit(label: str, color: str, msg: str, context: dict) -> None:
    print(f"{_tag(label, color)} {msg}", flush=True)

    # Structured context (when extra data provided)
    for key, value in context.items():
        print(f"  {key}: {value}", flush=True)


def info(msg, **context):
    """Print info message with optional structured context."""
    _emit('INFO', BLUE, msg, context)


def success(msg, **context):
    _emit('SUCCESS', GREEN, msg, context)


def warn(msg, **context):
    _emit('WARN', YELLOW, msg, context)


def error(msg, **context):
    """Print error message. Does not exit; callers raise or return a code."""
    _emit('ERROR', RED, msg, context)


def debug(msg, **context):
    """Print debug message (only shown when DEBUG logging is enabled)."""
    if not DEBUG_ENABLED:
        return
    _emit('DEBUG', BLUE, msg, context)


def plain(msg: str = "") -> None:
    print(msg, flush=True)
