"""Structured logging system for scanprep.

This module provides a centralized logging system with structured output,
configurable log levels, and integration with the CLI verbose flag.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(Enum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_RESERVED_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "getMessage",
        "message",
        "taskName",
    },
)


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_type = record.exc_info[0].__name__ if record.exc_info[0] else None
            exc_message = str(record.exc_info[1]) if record.exc_info[1] else None
            log_entry["exception"] = {
                "type": exc_type,
                "message": exc_message,
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_FIELDS}
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ScanprepLogger:
    """Centralized logger for scanprep with structured output support."""

    def __init__(self, name: str = "scanprep"):
        self.name = name
        self.logger = logging.getLogger(name)
        self.console = Console(stderr=True)
        self._configured = False
        self._verbose = False
        self._structured_output = False

    def configure(
        self,
        level: str | LogLevel = LogLevel.INFO,
        verbose: bool = False,
        structured_output: bool = False,
        log_file: Path | None = None,
    ) -> None:
        """Configure the logging system.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            verbose: Enable verbose logging (sets level to DEBUG)
            structured_output: Enable structured JSON output
            log_file: Optional file path for log output
        """
        if self._configured:
            return

        self._verbose = verbose
        self._structured_output = structured_output

        if verbose:
            log_level = logging.DEBUG
        elif isinstance(level, LogLevel):
            log_level = getattr(logging, level.value)
        else:
            log_level = getattr(logging, level.upper())

        self.logger.setLevel(log_level)
        self.logger.handlers.clear()

        if structured_output:
            console_handler: logging.Handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_handler = RichHandler(
                console=self.console,
                show_time=verbose,
                show_path=verbose,
                markup=True,
                rich_tracebacks=True,
            )
            console_handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))

        console_handler.setLevel(log_level)
        self.logger.addHandler(console_handler)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(StructuredFormatter())
            # Files always get everything
            file_handler.setLevel(logging.DEBUG)
            self.logger.addHandler(file_handler)

        self._configured = True

    def reset(self) -> None:
        """Drop handlers so the logger can be configured again."""
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self._configured = False
        self._verbose = False
        self._structured_output = False

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self.logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self.logger.error(message, extra=kwargs)

    def log_operation(
        self,
        operation: str,
        status: str,
        details: dict[str, Any] | None = None,
        level: LogLevel = LogLevel.INFO,
    ) -> None:
        """Log a structured operation result.

        Args:
            operation: Name of the operation (e.g., "language_scan", "options_write")
            status: Operation status (e.g., "success", "failed", "skipped")
            details: Additional operation details
            level: Log level for this operation
        """
        log_data: dict[str, Any] = {
            "operation": operation,
            "status": status,
        }
        if details:
            log_data.update(details)

        message = f"Operation '{operation}' {status}"
        if details and "message" in details:
            message = details["message"]
            del log_data["message"]

        getattr(self, level.value.lower())(message, **log_data)

    def is_verbose(self) -> bool:
        """Check if verbose logging is enabled."""
        return self._verbose

    def is_debug_enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return self.logger.isEnabledFor(logging.DEBUG)


_logger_instance: ScanprepLogger | None = None


def get_logger(name: str = "scanprep") -> ScanprepLogger:
    """Get the global logger instance.

    Args:
        name: Logger name (default: "scanprep")

    Returns:
        ScanprepLogger instance
    """
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = ScanprepLogger(name)
    return _logger_instance


def configure_logging(
    level: str | LogLevel = LogLevel.INFO,
    verbose: bool = False,
    structured_output: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure the global logging system."""
    get_logger().configure(
        level=level,
        verbose=verbose,
        structured_output=structured_output,
        log_file=log_file,
    )
