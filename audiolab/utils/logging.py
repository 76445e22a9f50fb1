"""
Structured logging utilities for the audiolab analysis engine.

Provides JSON-formatted logging for production environments and
human-readable logging for development. All library loggers live under
the ``audiolab`` namespace so an embedding application can tune them
as one tree.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "audiolab"

# LogRecord attributes that are not user supplied context
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs log records as single-line JSON objects.

    Any ``extra={...}`` fields passed to a logging call (sample rate,
    analyzer name, file path, ...) are collected under ``context``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if context:
            log_obj["context"] = context

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to log levels for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format with color codes without mutating the shared record."""
        color = self.COLORS.get(record.levelname, "")
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    console_enabled: bool = True,
    colored: bool = True,
) -> logging.Logger:
    """
    Configure the ``audiolab`` logger tree.

    Only the library's own logger is touched; the host application's root
    logger and handlers are left alone.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Console output format ("json" or "text")
        log_file: Optional file path for log output (always JSON)
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup files to keep
        console_enabled: Whether to log to stdout
        colored: Whether to use colored output (text format only)

    Returns:
        logging.Logger: The configured ``audiolab`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers = []
    logger.propagate = False

    if log_format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        datefmt = "%Y-%m-%d %H:%M:%S"
        if colored:
            formatter = ColoredFormatter(fmt, datefmt)
        else:
            formatter = logging.Formatter(fmt, datefmt)

    if console_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger


def configure_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Configure logging from the ``logging`` section of the configuration.

    Args:
        config: Full configuration dictionary (see ``get_default_config``)

    Returns:
        logging.Logger: The configured ``audiolab`` logger
    """
    section = (config or {}).get("logging", {})
    return setup_logging(
        level=section.get("level", "INFO"),
        log_format=section.get("format", "text"),
        log_file=section.get("file"),
        console_enabled=section.get("console", True),
        colored=section.get("colored", True),
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the ``audiolab`` namespace.

    Args:
        name: Logger name, e.g. ``"engine"`` or ``"analyzer.features"``

    Returns:
        logging.Logger: Logger named ``audiolab.<name>``
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class AnalysisContextAdapter(logging.LoggerAdapter):
    """
    Logger adapter that attaches analysis context to every message.

    Useful for tagging all log lines of one file's analysis with its
    path and sample rate.
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra", {}))
        kwargs["extra"] = extra
        return msg, kwargs


def create_logger_with_context(
    name: str, context: Dict[str, Any]
) -> AnalysisContextAdapter:
    """
    Create a logger with persistent context.

    Example:
        logger = create_logger_with_context(
            "engine", {"file_path": "kick.wav", "sample_rate": 44100}
        )
        logger.info("Extracting features")
    """
    return AnalysisContextAdapter(get_logger(name), context)
