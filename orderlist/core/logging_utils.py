"""Logging helpers for consistent service tags."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Callable

LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

_DB_LOGGERS = ("psycopg", "psycopg.pool")


def service_label(default: str = "unknown") -> str:
    """Return a normalized service label for log formatting."""
    for key in ("SERVICE_ROLE", "ORDER_LIST_SERVICE"):
        value = os.getenv(key)
        if value and value.strip():
            return value.strip().lower()
    return default


def log_format(default: str = "unknown") -> str:
    """Return the log format string with a service label."""
    return f"%(asctime)s | %(levelname)s | {service_label(default)} | %(name)s | %(message)s"


def parse_log_level(raw: str | None, fallback: int = logging.INFO) -> int:
    """Parse a log level string into a logging constant."""
    if not raw:
        return fallback
    raw = raw.strip().upper()
    if raw.isdigit():
        return int(raw)
    return LOG_LEVELS.get(raw, fallback)


def is_known_log_level(raw: str | None) -> bool:
    """Return True if raw is a valid log level name or numeric value."""
    if not raw:
        return False
    raw = raw.strip().upper()
    return raw.isdigit() or raw in LOG_LEVELS


def _truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _sanitize_filename(value: str) -> str:
    safe = [char if char.isalnum() or char in {"-", "_"} else "_" for char in value]
    return "".join(safe) or "service"


def _resolve_log_file(default_label: str) -> str | None:
    raw_file = os.getenv("LOG_FILE")
    if raw_file:
        return os.path.expandvars(os.path.expanduser(raw_file))
    raw_dir = os.getenv("LOG_DIR")
    if raw_dir:
        log_dir = Path(os.path.expandvars(os.path.expanduser(raw_dir)))
        return str(log_dir / f"{_sanitize_filename(service_label(default_label))}.log")
    return None


def _file_handler(log_path: Path) -> logging.Handler | None:
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path)
    except OSError as exc:
        print(
            f"Warning: unable to create log file at {log_path}: {exc}. "
            "Falling back to stdout logging.",
            file=sys.stderr,
        )
        return None


def log_handlers(default_label: str = "unknown") -> list[logging.Handler]:
    """Build log handlers for stdout and optional file logging."""
    handlers: list[logging.Handler] = []
    log_file = _resolve_log_file(default_label)
    if log_file:
        handler = _file_handler(Path(log_file))
        if handler is not None:
            handlers.append(handler)
    if _truthy(os.getenv("LOG_STDOUT", "1")) or not handlers:
        handlers.append(logging.StreamHandler())
    return handlers


def configure_db_logging(default_level: int | None = None) -> None:
    """Quiet psycopg pool chatter unless explicitly overridden."""
    raw = os.getenv("LOG_DB_LEVEL")
    if raw:
        level = parse_log_level(raw, logging.WARNING)
    elif default_level is not None and default_level <= logging.DEBUG:
        level = logging.WARNING
    else:
        return
    for logger_name in _DB_LOGGERS:
        logging.getLogger(logger_name).setLevel(level)


def configure_logging(
    *,
    service_name: str,
    logger: logging.Logger,
    basic_config: Callable[..., None],
    level_raw: str | None = None,
) -> int:
    """Configure logging with standard handlers and warn on unknown levels."""
    if level_raw is None:
        level_raw = os.getenv("LOG_LEVEL", "INFO")
    level = parse_log_level(level_raw, logging.INFO)
    basic_config(
        level=level,
        format=log_format(default=service_name),
        handlers=log_handlers(service_name),
    )
    configure_db_logging(level)
    if not is_known_log_level(level_raw):
        logger.warning("Unknown LOG_LEVEL=%s; defaulting to INFO", level_raw)
    return level
