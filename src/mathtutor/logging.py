"""
mathtutor Structured Logging

Provides a configured logger for the tutor backend using stdlib logging
with structured context.

Usage:
    from mathtutor.logging import get_logger

    logger = get_logger("mathtutor.sandbox")
    logger.info("Snippet executed", extra={"artifact": "snippet-1a2b.py", "duration_ms": 41.2})

For production, configure with JSON output:
    from mathtutor.logging import configure_logging
    configure_logging(json_output=True, level="INFO")
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

# Keys lifted from LogRecord attributes set via extra={...}
CONTEXT_KEYS = (
    "tool_name",
    "tool_use_id",
    "error_kind",
    "artifact",
    "exit_code",
    "state",
    "round",
    "provider",
    "duration_ms",
)


class MathTutorFormatter(logging.Formatter):
    """Structured log formatter.

    Outputs either human-readable or JSON format depending on configuration.
    """

    def __init__(self, json_output: bool = False):
        super().__init__()
        self._json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self._json_output:
            return json.dumps(log_data, default=str)

        extra_keys = {k: v for k, v in log_data.items()
                      if k not in ("timestamp", "level", "logger", "message", "exception")}
        extra_str = ""
        if extra_keys:
            extra_str = " | " + " ".join(f"{k}={v}" for k, v in extra_keys.items())

        line = f"[{log_data['timestamp']}] {record.levelname:8s} {record.name}: {record.getMessage()}{extra_str}"
        if "exception" in log_data:
            line += "\n" + log_data["exception"]
        return line


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> None:
    """Configure mathtutor logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to MATHTUTOR_LOG_LEVEL or INFO.
        json_output: If True, output JSON lines. Defaults to MATHTUTOR_LOG_JSON.
    """
    if level is None:
        level = os.environ.get("MATHTUTOR_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.environ.get("MATHTUTOR_LOG_JSON", "").lower() in ("1", "true", "yes")

    root_logger = logging.getLogger("mathtutor")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(MathTutorFormatter(json_output=json_output))
    root_logger.addHandler(handler)

    root_logger.propagate = False


def get_logger(name: str = "mathtutor") -> logging.Logger:
    """Get a mathtutor logger instance.

    Args:
        name: Logger name (usually a module path like "mathtutor.tools").
    """
    return logging.getLogger(name)


# Auto-configure with sensible defaults on import
configure_logging()
