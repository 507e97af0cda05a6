"""Structured logging configuration for tablecast."""

import logging
import sys
from typing import Optional

try:
    from json_log_formatter import JSONFormatter
except ImportError:
    JSONFormatter = None  # type: ignore


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    source_name: Optional[str] = None,
) -> None:
    """Configure logging for tablecast.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, use JSON format; otherwise use normal format
        source_name: Optional data source name to include in every record
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("tablecast")
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    if json_format:
        if JSONFormatter is None:
            raise ImportError(
                "json-log-formatter is required for JSON logging. "
                "Install it with: pip install json-log-formatter"
            )
        formatter = JSONFormatter()
    else:
        formatter = StructuredFormatter(source_name=source_name)

    handler.setFormatter(formatter)
    logger.addHandler(handler)


class StructuredFormatter(logging.Formatter):
    """Structured formatter that adds context to log messages."""

    def __init__(self, source_name: Optional[str] = None):
        super().__init__()
        self.source_name = source_name

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with context."""
        context = getattr(record, "context", {})

        parts = [f"[{record.levelname}]"]

        if self.source_name:
            parts.append(f"source={self.source_name}")

        if getattr(record, "row_number", None) is not None:
            parts.append(f"row={record.row_number}")

        for key, value in context.items():
            parts.append(f"{key}={value}")

        parts.append(record.getMessage())

        return " ".join(parts)


def set_source_name(source_name: Optional[str]) -> None:
    """Tag records from the configured tablecast handlers with ``source_name``."""
    for handler in logging.getLogger("tablecast").handlers:
        if isinstance(handler.formatter, StructuredFormatter):
            handler.formatter.source_name = source_name
