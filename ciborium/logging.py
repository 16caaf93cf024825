"""CIBorium logging with JSON file output and build context."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import MutableMapping
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# Build identity attached to every record
_build_context: dict[str, Any] = {}


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "ts": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if _build_context:
            log_data.update(_build_context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in ["step", "container", "command", "status"]:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for human-readable output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors.

        Args:
            record: Log record to format

        Returns:
            Colored log string
        """
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S")

        context_parts = []
        if "job" in _build_context:
            build = _build_context.get("build")
            context_parts.append(f"{_build_context['job']}#{build}" if build is not None else str(_build_context["job"]))
        if hasattr(record, "step"):
            context_parts.append(f"S{record.step}")

        context = f"[{':'.join(context_parts)}]" if context_parts else ""

        return f"{color}{timestamp} {record.levelname:8s}{self.RESET} {context} {record.getMessage()}"


def set_build_context(
    job: str | None = None,
    build: int | None = None,
    **kwargs: Any,
) -> None:
    """Set build identity for all subsequent log messages.

    Args:
        job: Job name to include in logs
        build: Build number to include in logs
        **kwargs: Additional context fields
    """
    global _build_context
    _build_context = {}

    if job is not None:
        _build_context["job"] = job
    if build is not None:
        _build_context["build"] = build
    _build_context.update(kwargs)


def clear_build_context() -> None:
    """Clear all build context."""
    global _build_context
    _build_context = {}


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ciborium namespace.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(f"ciborium.{name}")


def setup_logging(
    level: str = "info",
    log_dir: str | Path | None = None,
    json_output: bool = True,
    console_output: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """Set up logging configuration.

    Args:
        level: Log level (debug, info, warn, error)
        log_dir: Directory for log files
        json_output: Whether to output JSON logs to file
        console_output: Whether to output to console
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
    """
    if level.lower() == "warn":
        level = "warning"
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger("ciborium")
    root_logger.setLevel(log_level)

    root_logger.handlers = []

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ConsoleFormatter())
        root_logger.addHandler(console_handler)

    if log_dir and json_output:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / "ciborium.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    root_logger.propagate = False


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that adds step context to log messages."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        """Process log message with extra context.

        Args:
            msg: Log message
            kwargs: Keyword arguments

        Returns:
            Processed message and kwargs
        """
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def get_step_logger(step: int) -> LoggerAdapter:
    """Get a logger adapter for one build step.

    Args:
        step: 1-based step index

    Returns:
        LoggerAdapter with step context
    """
    return LoggerAdapter(get_logger("step"), {"step": step})


# Initialize default logging on import
setup_logging(console_output=True, json_output=False, level="warning")
