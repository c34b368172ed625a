"""Centralized logging configuration for the provisioner."""

import json
import logging
import os
from datetime import datetime, timezone

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class StepContextFilter(logging.Filter):
    """Default the ``step`` attribute so formatters can always read it.

    The orchestrator passes ``extra={"step": name}`` on step-scoped
    records; everything else gets ``"-"``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "step"):
            record.step = "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON log formatter for log aggregator compatibility.

    Produces one JSON object per line (NDJSON) with fields:
    timestamp, level, logger, message, and optionally step and exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        step = getattr(record, "step", "-")
        if step != "-":
            log_entry["step"] = step
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def _make_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(level_override: str | None = None) -> None:
    """Configure logging based on environment variables.

    Args:
        level_override: If set, takes precedence over LOG_LEVEL env var.

    Environment variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR).
            Defaults to INFO.
        LOG_FORMAT: Output format. "json" for JSON lines,
            anything else for human-readable. Defaults to "text".
        LOG_FILE: Optional path. When set, records are also appended
            to this file at DEBUG level, so captured build tool output
            is kept even when the console is quieter.
    """
    level_name = (level_override or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    log_format = os.getenv("LOG_FORMAT", "text").lower()
    log_file = os.getenv("LOG_FILE")

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(_make_formatter(log_format))
    console.addFilter(StepContextFilter())
    root_logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_make_formatter(log_format))
        file_handler.addFilter(StepContextFilter())
        root_logger.addHandler(file_handler)
        root_logger.setLevel(min(level, logging.DEBUG))
    else:
        root_logger.setLevel(level)

    # Download helpers log every connection at DEBUG
    for name in ("urllib3", "urllib.request"):
        logging.getLogger(name).setLevel(logging.WARNING)
