"""Logging infrastructure for Keto Recipe Service.

Provides centralized logging with configurable format (text/JSON) and level.
Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)
- NO_COLOR: any value disables ANSI colors in text output

Pipeline code attaches request context (user, Flowise session/flow, cache key)
with `extra=log_context(...)`. Both formatters render it: JSON as top-level
keys, text as a trailing `[user=7 flow=recipe-flow]` tag.
"""

import json
import logging
import os
import sys
from typing import Any


# Record attribute -> short label used in text output
CONTEXT_FIELDS = {
    "user_id": "user",
    "session_id": "session",
    "flow_id": "flow",
    "cache_key": "key",
}


def log_context(**fields: Any) -> dict[str, Any]:
    """Build an `extra=` mapping from known context fields, dropping unset ones.

    Raises:
        ValueError: For a field name the formatters do not render.
    """
    unknown = set(fields) - set(CONTEXT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown log context fields: {', '.join(sorted(unknown))}")
    return {name: value for name, value in fields.items() if value is not None}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context fields present on a record, in CONTEXT_FIELDS order."""
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per line (for log shippers)."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string with timestamp, level, logger name, message, context fields and optional traceback.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Include exception traceback if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(record_context(record))

        # Context values may be non-JSON types (e.g. a UUID user id)
        return json.dumps(log_data, default=str)


class RichTextFormatter(logging.Formatter):
    """Formatter that outputs colored text with emoji icons."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "RESET": "\033[0m",       # Reset
    }

    # Emoji icons for each level
    ICONS = {
        "DEBUG": "🔍",
        "INFO": "🥑",
        "WARNING": "⚠️",
        "ERROR": "❌",
    }

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as (optionally colored) text.

        Args:
            record: Log record to format.

        Returns:
            Formatted string with emoji icon, context tag and, if enabled, color codes.
        """
        level = record.levelname
        color = self.COLORS.get(level, self.COLORS["RESET"]) if self.use_color else ""
        reset = self.COLORS["RESET"] if self.use_color else ""
        icon = self.ICONS.get(level, "")

        # Format: YYYY-MM-DD HH:MM:SS
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")

        context = record_context(record)
        tag = ""
        if context:
            tag = " [" + " ".join(f"{CONTEXT_FIELDS[name]}={value}" for name, value in context.items()) + "]"

        body = f"{icon} {timestamp} {level:<8} {record.name:<16} {record.getMessage()}{tag}"

        # Include exception traceback if present
        if record.exc_info:
            body += f"\n{self.formatException(record.exc_info)}"

        return f"{color}{body}{reset}"


def _color_enabled() -> bool:
    # Plain text when piped (e.g. `python query.py ... > out.txt`) or NO_COLOR is set
    return not os.getenv("NO_COLOR") and sys.stdout.isatty()


def get_logger(name: str) -> logging.Logger:
    """Create and configure logger instance.

    Args:
        name: Logger name, typically module name.

    Returns:
        Configured logger instance.
    """
    logger_instance = logging.getLogger(name)

    # Return existing logger if already configured
    if logger_instance.handlers:
        return logger_instance

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_type = os.getenv("LOG_TYPE", "text").lower()

    log_level = getattr(logging, log_level_str, logging.INFO)
    logger_instance.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if log_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = RichTextFormatter(use_color=_color_enabled())

    handler.setFormatter(formatter)
    logger_instance.addHandler(handler)

    return logger_instance


# Create module-level logger instance
logger = get_logger("keto_recipes")

# aiohttp logs every connection and request at DEBUG/INFO
for _name in ("aiohttp", "aiohttp.client", "aiohttp.access"):
    logging.getLogger(_name).setLevel(logging.WARNING)
