# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for the release packager.

Every log entry is a single JSON line, timestamped, leveled, and tagged with
the source module, so CI logs can be grepped or fed to a log shipper without
parsing free text.

How this works:
  - We use Python's standard `logging` module under the hood, but replace the
    default formatter with JsonFormatter, which serializes every log record
    into a single JSON line.
  - Each logger gets a stdout handler, and optionally a file handler.
  - `get_logger` is the only way to create loggers. `configure_logging` retunes
    the loggers that already exist once the CLI knows the requested level.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "kaklsp_release.release.builder", "msg": "Build finished", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER_PREFIX = "kaklsp_release"

# LogRecord attributes that are never copied into the JSON entry.
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each log entry contains four mandatory fields:
      ts     : ISO 8601 UTC timestamp
      level  : log level name
      module : the logger name (usually the Python module path)
      msg    : the formatted message string

    Fields passed through `extra=` are merged in as additional context, which
    is how the pipeline attaches target triples, exit codes, paths, etc.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def _attach_file_handler(logger: logging.Logger, log_file: Path, level: int) -> None:
    target = str(log_file.resolve())
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Every module should call this once at the top and use the returned
    logger instance.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  stdout and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    # Avoid stacking handlers if get_logger is called multiple times for the
    # same name (happens in tests).
    if logger.handlers:
        return logger

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(JsonFormatter())
    logger.addHandler(stdout_handler)

    if log_file is not None:
        _attach_file_handler(logger, log_file, level)

    # Don't propagate to root logger, we handle all output ourselves.
    logger.propagate = False

    return logger


def configure_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> int:
    """
    Apply a level (and optional log file) to every package logger created so far.

    Module loggers are created at import time with the default level, before
    the CLI has parsed --log-level. Call this after the pipeline modules are
    imported.

    Returns:
        Number of loggers that were reconfigured.
    """
    level = _resolve_log_level(log_level)
    touched = 0
    for name in list(logging.Logger.manager.loggerDict):
        if name != PACKAGE_LOGGER_PREFIX and not name.startswith(PACKAGE_LOGGER_PREFIX + "."):
            continue
        logger = logging.getLogger(name)
        if not logger.handlers:
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        if log_file is not None:
            _attach_file_handler(logger, log_file, level)
        touched += 1
    return touched
